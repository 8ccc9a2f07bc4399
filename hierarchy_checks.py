"""
Concrete accessibility checks.

Each check is registered once, in preset order, so registry order is the
canonical order of results. Elements a check cannot evaluate are reported
as NOT_RUN with the reason in the message.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

from accessibility_check import (
    MESSAGE_NOT_IMPORTANT,
    MESSAGE_NOT_VISIBLE,
    AccessibilityCheck,
    CheckCategory,
    CheckParameters,
    ColorSample,
    register_check,
)
from check_results import CheckResult, ResultType
from color_utils import (
    COLOR_SECURE_WINDOW_CENSOR,
    CONTRAST_RATIO_WCAG_LARGE_TEXT,
    CONTRAST_RATIO_WCAG_NORMAL_TEXT,
    CONTRAST_TOLERANCE,
    WCAG_LARGE_BOLD_TEXT_MIN_SIZE,
    WCAG_LARGE_TEXT_MIN_SIZE,
    alpha,
    contrast_ratio_range,
    to_hex_string,
)
from element_utils import (
    IMAGE_VIEW_CLASS_NAMES,
    SWITCH_CLASS_NAMES,
    TEXT_VIEW_CLASS_NAMES,
    WEB_VIEW_CLASS_NAMES,
    is_editable,
    should_focus,
    speakable_text,
)
from errors import DataUnavailableError
from models import SPAN_CLICKABLE, Element, Hierarchy

logger = logging.getLogger(__name__)


def _preorder_index(hierarchy: Hierarchy) -> Dict[int, int]:
    return {element.element_id: index
            for index, element in enumerate(hierarchy.all_elements())}


def _sorted_by_tree_order(results: List[CheckResult], hierarchy: Hierarchy) -> List[CheckResult]:
    order = _preorder_index(hierarchy)
    return sorted(results, key=lambda result: order.get(result.element_id, -1))


@register_check
class SpeakableTextPresentCheck(AccessibilityCheck):
    """Focusable items need something for a screen reader to announce"""

    check_id = "speakable_text_present"
    title = "Item label"
    category = CheckCategory.CONTENT_LABELING

    RESULT_ID_NOT_VISIBLE = 1
    RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY = 2
    RESULT_ID_SHOULD_NOT_FOCUS = 3
    RESULT_ID_MISSING_SPEAKABLE_TEXT = 4
    RESULT_ID_WEB_CONTENT = 5

    messages = {
        RESULT_ID_NOT_VISIBLE: MESSAGE_NOT_VISIBLE,
        RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY: MESSAGE_NOT_IMPORTANT,
        RESULT_ID_SHOULD_NOT_FOCUS: "This item would not be focused by a screen reader.",
        RESULT_ID_MISSING_SPEAKABLE_TEXT:
            "This item may not have a label readable by screen readers.",
        RESULT_ID_WEB_CONTENT: "This web content is evaluated by web accessibility tools.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.visible:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_VISIBLE)
            elif not element.important_for_accessibility:
                yield self.result(ResultType.NOT_RUN, element,
                                  self.RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY)
            elif element.class_name_endswith(*WEB_VIEW_CLASS_NAMES) and not element.children:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_WEB_CONTENT)
            elif not should_focus(element):
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_SHOULD_NOT_FOCUS)
            elif not speakable_text(element):
                yield self.result(ResultType.ERROR, element,
                                  self.RESULT_ID_MISSING_SPEAKABLE_TEXT)


@register_check
class EditableContentDescCheck(AccessibilityCheck):
    """Editable fields should be labeled by a separate element, not a content description"""

    check_id = "editable_content_desc"
    title = "Editable item label"
    category = CheckCategory.IMPLEMENTATION

    RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY = 2
    RESULT_ID_EDITABLE_CONTENT_DESC = 3
    RESULT_ID_NOT_EDITABLE = 4

    messages = {
        RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY: MESSAGE_NOT_IMPORTANT,
        RESULT_ID_EDITABLE_CONTENT_DESC:
            "This editable item has a content description \"{content_description}\". "
            "Screen readers may read it instead of the entered text; "
            "label the field with a separate visible element instead.",
        RESULT_ID_NOT_EDITABLE: "This item is not editable.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.important_for_accessibility:
                yield self.result(ResultType.NOT_RUN, element,
                                  self.RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY)
            elif not is_editable(element):
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_EDITABLE)
            elif element.content_description:
                yield self.result(ResultType.ERROR, element,
                                  self.RESULT_ID_EDITABLE_CONTENT_DESC,
                                  content_description=element.content_description)


@register_check
class TouchTargetSizeCheck(AccessibilityCheck):
    """
    Clickable items should be at least 48x48dp.

    Items touching a screen edge only need 32dp in that dimension, as do
    items in an input method window. A custom size scales those limits.
    """

    check_id = "touch_target_size"
    title = "Touch target size"
    category = CheckCategory.TOUCH_TARGET_SIZE

    TOUCH_TARGET_MIN_SIZE = 48
    TOUCH_TARGET_MIN_SIZE_ON_EDGE = 32
    TOUCH_TARGET_MIN_SIZE_IME_CONTAINER = 32

    RESULT_ID_NOT_CLICKABLE = 1
    RESULT_ID_NOT_VISIBLE = 2
    RESULT_ID_SMALL_TOUCH_TARGET_WIDTH_AND_HEIGHT = 3
    RESULT_ID_SMALL_TOUCH_TARGET_HEIGHT = 4
    RESULT_ID_SMALL_TOUCH_TARGET_WIDTH = 5
    RESULT_ID_CUSTOMIZED_SMALL_TOUCH_TARGET_WIDTH_AND_HEIGHT = 6
    RESULT_ID_CUSTOMIZED_SMALL_TOUCH_TARGET_HEIGHT = 7
    RESULT_ID_CUSTOMIZED_SMALL_TOUCH_TARGET_WIDTH = 8

    messages = {
        RESULT_ID_NOT_CLICKABLE: "This item is not clickable.",
        RESULT_ID_NOT_VISIBLE: MESSAGE_NOT_VISIBLE,
        RESULT_ID_SMALL_TOUCH_TARGET_WIDTH_AND_HEIGHT:
            "This item's size is {width}dp x {height}dp. Consider making this touch "
            "target {required_width}dp wide and {required_height}dp high or larger.",
        RESULT_ID_SMALL_TOUCH_TARGET_HEIGHT:
            "This item's height is {height}dp. Consider making the height of this "
            "touch target {required_height}dp or larger.",
        RESULT_ID_SMALL_TOUCH_TARGET_WIDTH:
            "This item's width is {width}dp. Consider making the width of this "
            "touch target {required_width}dp or larger.",
        RESULT_ID_CUSTOMIZED_SMALL_TOUCH_TARGET_WIDTH_AND_HEIGHT:
            "This item's size is {width}dp x {height}dp. Consider making this touch "
            "target {required_width}dp wide and {required_height}dp high or larger, "
            "as configured for this check.",
        RESULT_ID_CUSTOMIZED_SMALL_TOUCH_TARGET_HEIGHT:
            "This item's height is {height}dp. Consider making the height of this "
            "touch target {required_height}dp or larger, as configured for this check.",
        RESULT_ID_CUSTOMIZED_SMALL_TOUCH_TARGET_WIDTH:
            "This item's width is {width}dp. Consider making the width of this "
            "touch target {required_width}dp or larger, as configured for this check.",
    }

    ADDENDUM_CLICKABLE_ANCESTOR = (
        " A clickable ancestor of this item may handle touches on a larger area.")

    def message_for(self, result_id, metadata):
        message = super().message_for(result_id, metadata)
        if metadata.get('has_clickable_ancestor'):
            message += self.ADDENDUM_CLICKABLE_ANCESTOR
        return message

    def run_check(self, hierarchy, parameters, from_root):
        display = hierarchy.display
        customized = parameters.custom_touch_target_size is not None
        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not (element.clickable or element.long_clickable):
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_CLICKABLE)
                continue
            if not element.visible:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_VISIBLE)
                continue

            required_width, required_height = self.required_size(element, hierarchy, parameters)
            width = display.px_to_dp(element.bounds.width)
            height = display.px_to_dp(element.bounds.height)
            if width >= required_width and height >= required_height:
                continue

            has_clickable_ancestor = self._has_qualifying_clickable_ancestor(
                element, hierarchy, parameters)
            result_type = ResultType.WARNING if has_clickable_ancestor else ResultType.ERROR

            if width < required_width and height < required_height:
                result_id = self.RESULT_ID_SMALL_TOUCH_TARGET_WIDTH_AND_HEIGHT
            elif height < required_height:
                result_id = self.RESULT_ID_SMALL_TOUCH_TARGET_HEIGHT
            else:
                result_id = self.RESULT_ID_SMALL_TOUCH_TARGET_WIDTH
            if customized:
                # Customized ids mirror the default ones, offset by three
                result_id += 3

            yield self.result(result_type, element, result_id,
                              width=width, height=height,
                              required_width=required_width, required_height=required_height,
                              has_clickable_ancestor=has_clickable_ancestor)

    def required_size(self, element: Element, hierarchy: Hierarchy,
                      parameters: CheckParameters) -> Tuple[int, int]:
        minimum = self.TOUCH_TARGET_MIN_SIZE
        on_edge = self.TOUCH_TARGET_MIN_SIZE_ON_EDGE
        ime = self.TOUCH_TARGET_MIN_SIZE_IME_CONTAINER
        custom = parameters.custom_touch_target_size
        if custom is not None:
            on_edge = int(round(on_edge * custom / minimum))
            ime = int(round(ime * custom / minimum))
            minimum = custom

        window = hierarchy.window_of(element)
        if window is not None and window.window_type == "input_method":
            return ime, ime

        display = hierarchy.display
        bounds = element.bounds
        # Without display size only the top-left edges can be detected
        against_side = bounds.left == 0 or (
            display.width_px is not None and bounds.right == display.width_px)
        against_top_or_bottom = bounds.top == 0 or (
            display.height_px is not None and bounds.bottom == display.height_px)
        return (on_edge if against_side else minimum,
                on_edge if against_top_or_bottom else minimum)

    def _has_qualifying_clickable_ancestor(self, element: Element, hierarchy: Hierarchy,
                                           parameters: CheckParameters) -> bool:
        display = hierarchy.display
        for ancestor in element.ancestors():
            shares_action = ((ancestor.clickable and element.clickable)
                             or (ancestor.long_clickable and element.long_clickable))
            if not shares_action or ancestor.class_name_endswith('AbsListView', 'ListView',
                                                                 'GridView'):
                continue
            required_width, required_height = self.required_size(ancestor, hierarchy, parameters)
            if (display.px_to_dp(ancestor.bounds.width) >= required_width
                    and display.px_to_dp(ancestor.bounds.height) >= required_height):
                return True
        return False


@register_check
class DuplicateSpeakableTextCheck(AccessibilityCheck):
    """Several items announcing the same text are hard to tell apart"""

    check_id = "duplicate_speakable_text"
    title = "Duplicate item descriptions"
    category = CheckCategory.CONTENT_LABELING

    RESULT_ID_CLICKABLE_SAME_SPEAKABLE_TEXT = 1
    RESULT_ID_NON_CLICKABLE_SAME_SPEAKABLE_TEXT = 2

    messages = {
        RESULT_ID_CLICKABLE_SAME_SPEAKABLE_TEXT:
            "This clickable item's speakable text \"{speakable_text}\" is identical "
            "to that of {conflicting_count} other item(s).",
        RESULT_ID_NON_CLICKABLE_SAME_SPEAKABLE_TEXT:
            "This non-clickable item's speakable text \"{speakable_text}\" is identical "
            "to that of {conflicting_count} other item(s).",
    }

    def run_check(self, hierarchy, parameters, from_root):
        text_to_elements: Dict[str, List[Element]] = {}
        for element in hierarchy.active_window.all_elements():
            if not element.visible or not should_focus(element):
                continue
            text = speakable_text(element)
            if text:
                text_to_elements.setdefault(text, []).append(element)

        scope = set(id(e) for e in from_root.self_and_descendants()) if from_root else None
        results = []
        for text, elements in text_to_elements.items():
            if len(elements) < 2:
                continue
            in_scope = [e for e in elements if scope is None or id(e) in scope]
            clickable = [e for e in in_scope if e.clickable]
            non_clickable = [e for e in in_scope if not e.clickable]
            conflicting_count = len(elements) - 1
            if clickable:
                results.append(self.result(
                    ResultType.WARNING, clickable[0], self.RESULT_ID_CLICKABLE_SAME_SPEAKABLE_TEXT,
                    speakable_text=text, conflicting_count=conflicting_count))
            elif non_clickable:
                results.append(self.result(
                    ResultType.INFO, non_clickable[0],
                    self.RESULT_ID_NON_CLICKABLE_SAME_SPEAKABLE_TEXT,
                    speakable_text=text, conflicting_count=conflicting_count))
        return _sorted_by_tree_order(results, hierarchy)


def _is_large_text(element: Element) -> Optional[bool]:
    if element.text_size is None:
        return None
    if element.text_bold:
        return element.text_size >= WCAG_LARGE_BOLD_TEXT_MIN_SIZE
    return element.text_size >= WCAG_LARGE_TEXT_MIN_SIZE


class _ColorSamplingMixin:
    """Asks the caller's color source for an element's colors"""

    RESULT_ID_NO_COLOR_SOURCE = 20
    RESULT_ID_COLORS_UNAVAILABLE = 21
    RESULT_ID_SCREENCAPTURE_DATA_HIDDEN = 23
    RESULT_ID_SCREENCAPTURE_UNIFORM_COLOR = 24

    sampling_messages = {
        RESULT_ID_NO_COLOR_SOURCE: "No screen capture is available to sample colors.",
        RESULT_ID_COLORS_UNAVAILABLE: "Colors could not be sampled for this item: {reason}",
        RESULT_ID_SCREENCAPTURE_DATA_HIDDEN:
            "The screen capture of this item is hidden, e.g. by a secure window.",
        RESULT_ID_SCREENCAPTURE_UNIFORM_COLOR:
            "This item appears as a single uniform color in the screen capture.",
    }

    def sample_colors(self, element: Element, parameters: CheckParameters
                      ) -> Tuple[Optional[ColorSample], Optional[CheckResult]]:
        """Return (sample, None) or (None, NOT_RUN result)"""
        if parameters.color_source is None:
            return None, self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NO_COLOR_SOURCE)
        try:
            sample = parameters.color_source.sample(element.bounds)
        except DataUnavailableError as e:
            return None, self.result(ResultType.NOT_RUN, element,
                                     self.RESULT_ID_COLORS_UNAVAILABLE, reason=str(e))
        except Exception as e:
            logger.warning(f"Color source failed for element {element.element_id}: {e}",
                           exc_info=True)
            return None, self.result(ResultType.NOT_RUN, element,
                                     self.RESULT_ID_COLORS_UNAVAILABLE, reason=str(e))

        if not sample.foreground_colors or sample.foreground_colors[0] == sample.background_color:
            result_id = (self.RESULT_ID_SCREENCAPTURE_DATA_HIDDEN
                         if sample.background_color == COLOR_SECURE_WINDOW_CENSOR
                         else self.RESULT_ID_SCREENCAPTURE_UNIFORM_COLOR)
            return None, self.result(ResultType.NOT_RUN, element, result_id)
        return sample, None

    @staticmethod
    def low_contrast_colors(sample: ColorSample, required: float) -> List[Tuple[int, float]]:
        return [(color, ratio)
                for color, ratio in zip(sample.foreground_colors, sample.contrast_ratios)
                if required - ratio > CONTRAST_TOLERANCE]


@register_check
class TextContrastCheck(_ColorSamplingMixin, AccessibilityCheck):
    """
    Text must contrast with its background: 4.5:1, or 3:1 for large text.

    Declared text and background colors are evaluated first. When they are
    missing or the text is translucent, colors are sampled from the screen
    through the caller's color source, which yields lower-confidence
    WARNING results.
    """

    check_id = "text_contrast"
    title = "Text contrast"
    category = CheckCategory.LOW_CONTRAST

    RESULT_ID_NOT_VISIBLE = 1
    RESULT_ID_NOT_TEXT_VIEW = 2
    RESULT_ID_TEXTVIEW_EMPTY = 3
    RESULT_ID_COULD_NOT_GET_TEXT_COLOR = 4
    RESULT_ID_COULD_NOT_GET_BACKGROUND_COLOR = 5
    RESULT_ID_TEXT_MUST_BE_OPAQUE = 6
    RESULT_ID_TEXTVIEW_CONTRAST_NOT_SUFFICIENT = 8
    RESULT_ID_TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT = 11
    RESULT_ID_TEXTVIEW_HEURISTIC_CONTRAST_BORDERLINE = 12
    RESULT_ID_NOT_ENABLED = 13
    RESULT_ID_CUSTOMIZED_TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT = 15
    RESULT_ID_TRANSLUCENT_BACKGROUND_CONTRAST_UNCERTAIN = 17
    RESULT_ID_CUSTOMIZED_TEXTVIEW_CONTRAST_NOT_SUFFICIENT = 22

    messages = {
        RESULT_ID_NOT_VISIBLE: MESSAGE_NOT_VISIBLE,
        RESULT_ID_NOT_TEXT_VIEW: "This item is not a text view.",
        RESULT_ID_TEXTVIEW_EMPTY: "This text view is empty.",
        RESULT_ID_COULD_NOT_GET_TEXT_COLOR: "The text color of this item is unknown.",
        RESULT_ID_COULD_NOT_GET_BACKGROUND_COLOR: "The background color of this item is unknown.",
        RESULT_ID_TEXT_MUST_BE_OPAQUE:
            "The text of this item is not opaque ({text_opacity:.0f}% opacity).",
        RESULT_ID_NOT_ENABLED: "This item is not enabled.",
        RESULT_ID_TEXTVIEW_CONTRAST_NOT_SUFFICIENT:
            "The item's text contrast ratio is {contrast_ratio:.2f}. This ratio is based on "
            "a text color of {text_color} and background color of {background_color}. "
            "Consider increasing this item's text contrast ratio to "
            "{required_contrast_ratio:.2f} or greater.",
        RESULT_ID_CUSTOMIZED_TEXTVIEW_CONTRAST_NOT_SUFFICIENT:
            "The item's text contrast ratio is {contrast_ratio:.2f}. This ratio is based on "
            "a text color of {text_color} and background color of {background_color}. "
            "Consider increasing this item's text contrast ratio to "
            "{required_contrast_ratio:.2f} or greater, as configured for this check.",
        RESULT_ID_TRANSLUCENT_BACKGROUND_CONTRAST_UNCERTAIN:
            "The item's background {background_color} is translucent, so its text contrast "
            "ratio is between {min_contrast_ratio:.2f} and {max_contrast_ratio:.2f} depending "
            "on what is behind it. Consider a ratio of {required_contrast_ratio:.2f} "
            "or greater against any backdrop.",
        RESULT_ID_TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT:
            "The item's text contrast ratio is {contrast_ratio:.2f}. This ratio is based on "
            "an estimated foreground color of {foreground_color} and an estimated background "
            "color of {background_color}. Consider increasing this ratio to "
            "{required_contrast_ratio:.2f} or greater.",
        RESULT_ID_TEXTVIEW_HEURISTIC_CONTRAST_BORDERLINE:
            "The item's text contrast ratio is {contrast_ratio:.2f}. This ratio is based on "
            "an estimated foreground color of {foreground_color} and an estimated background "
            "color of {background_color}. Consider increasing this ratio to "
            "{required_contrast_ratio:.2f} or greater for small text, or "
            "{tolerant_contrast_ratio:.2f} or greater for large text.",
        RESULT_ID_CUSTOMIZED_TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT:
            "The item's text contrast ratio is {contrast_ratio:.2f}. This ratio is based on "
            "an estimated foreground color of {foreground_color} and an estimated background "
            "color of {background_color}. Consider increasing this ratio to "
            "{required_contrast_ratio:.2f} or greater, as configured for this check.",
        **_ColorSamplingMixin.sampling_messages,
    }

    def run_check(self, hierarchy, parameters, from_root):
        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.visible:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_VISIBLE)
                continue
            if (not element.class_name_endswith(*TEXT_VIEW_CLASS_NAMES)
                    or element.class_name_endswith(*SWITCH_CLASS_NAMES)):
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_TEXT_VIEW)
                continue
            if not element.text and not element.hint_text:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_TEXTVIEW_EMPTY)
                continue
            if not element.enabled:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_ENABLED)
                continue

            declared = self._evaluate_declared_colors(element, parameters)
            if declared is None:
                continue
            if declared.result_type != ResultType.NOT_RUN or parameters.color_source is None:
                yield declared
                continue
            # Declared colors were unusable, fall back to the screen capture
            sampled = self._evaluate_sampled_colors(element, parameters)
            if sampled is not None:
                yield sampled

    def _required_ratio(self, element: Element, parameters: CheckParameters) -> float:
        if parameters.custom_text_contrast_ratio is not None:
            return parameters.custom_text_contrast_ratio
        if _is_large_text(element):
            return CONTRAST_RATIO_WCAG_LARGE_TEXT
        return CONTRAST_RATIO_WCAG_NORMAL_TEXT

    def _evaluate_declared_colors(self, element: Element,
                                  parameters: CheckParameters) -> Optional[CheckResult]:
        text_color = element.text_color
        background = element.background_color
        if text_color is None:
            return self.result(ResultType.NOT_RUN, element,
                               self.RESULT_ID_COULD_NOT_GET_TEXT_COLOR)
        if background is None:
            return self.result(ResultType.NOT_RUN, element,
                               self.RESULT_ID_COULD_NOT_GET_BACKGROUND_COLOR)
        if alpha(text_color) < 255:
            return self.result(ResultType.NOT_RUN, element, self.RESULT_ID_TEXT_MUST_BE_OPAQUE,
                               text_opacity=alpha(text_color) / 255.0 * 100)

        required = self._required_ratio(element, parameters)
        min_ratio, max_ratio = contrast_ratio_range(text_color, background)
        if required - max_ratio > CONTRAST_TOLERANCE:
            result_id = (self.RESULT_ID_CUSTOMIZED_TEXTVIEW_CONTRAST_NOT_SUFFICIENT
                         if parameters.custom_text_contrast_ratio is not None
                         else self.RESULT_ID_TEXTVIEW_CONTRAST_NOT_SUFFICIENT)
            return self.result(ResultType.ERROR, element, result_id,
                               contrast_ratio=max_ratio,
                               text_color=to_hex_string(text_color),
                               background_color=to_hex_string(background),
                               required_contrast_ratio=required)
        if required - min_ratio > CONTRAST_TOLERANCE:
            return self.result(ResultType.WARNING, element,
                               self.RESULT_ID_TRANSLUCENT_BACKGROUND_CONTRAST_UNCERTAIN,
                               min_contrast_ratio=min_ratio, max_contrast_ratio=max_ratio,
                               text_color=to_hex_string(text_color),
                               background_color=to_hex_string(background),
                               required_contrast_ratio=required)
        return None

    def _evaluate_sampled_colors(self, element: Element,
                                 parameters: CheckParameters) -> Optional[CheckResult]:
        sample, not_run = self.sample_colors(element, parameters)
        if sample is None:
            return not_run

        background = to_hex_string(sample.background_color)
        custom = parameters.custom_text_contrast_ratio
        if custom is not None:
            low = self.low_contrast_colors(sample, custom)
            if low:
                return self._heuristic_result(
                    element, self.RESULT_ID_CUSTOMIZED_TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT,
                    low, background, required_contrast_ratio=custom)
            return None

        large = _is_large_text(element)
        if large is not None:
            required = CONTRAST_RATIO_WCAG_LARGE_TEXT if large else CONTRAST_RATIO_WCAG_NORMAL_TEXT
        else:
            required = CONTRAST_RATIO_WCAG_LARGE_TEXT
        low = self.low_contrast_colors(sample, required)
        if low:
            return self._heuristic_result(
                element, self.RESULT_ID_TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT,
                low, background, required_contrast_ratio=required)

        if large is None:
            # Unknown text size: passes for large text, may fail for small text
            low = self.low_contrast_colors(sample, CONTRAST_RATIO_WCAG_NORMAL_TEXT)
            if low:
                return self._heuristic_result(
                    element, self.RESULT_ID_TEXTVIEW_HEURISTIC_CONTRAST_BORDERLINE,
                    low, background, required_contrast_ratio=CONTRAST_RATIO_WCAG_NORMAL_TEXT,
                    tolerant_contrast_ratio=CONTRAST_RATIO_WCAG_LARGE_TEXT)
        return None

    def _heuristic_result(self, element, result_id, low, background, **extra):
        lowest_color, lowest_ratio = min(low, key=lambda pair: pair[1])
        return self.result(
            ResultType.WARNING, element, result_id,
            contrast_ratio=lowest_ratio,
            foreground_color=to_hex_string(lowest_color),
            background_color=background,
            low_contrast_foreground_colors=[to_hex_string(color) for color, _ in low],
            low_contrast_ratios=[ratio for _, ratio in low],
            **extra)


@register_check
class ClickableSpanCheck(AccessibilityCheck):
    """
    Links inside text must be absolute URL spans.

    Before Android 8.0 screen readers could only open spans that carry an
    absolute URL; other clickable spans are unreachable. Snapshots from
    newer platforms yield a single hierarchy-level NOT_RUN.
    """

    check_id = "clickable_span"
    title = "Clickable links"
    category = CheckCategory.IMPLEMENTATION

    APPLICABLE_UNTIL_SDK_VERSION = 26

    RESULT_ID_NOT_TEXT_VIEW = 2
    RESULT_ID_NULL_URL = 3
    RESULT_ID_RELATIVE_LINK = 4
    RESULT_ID_CLICKABLE_SPAN = 5
    RESULT_ID_VERSION_NOT_APPLICABLE = 6

    messages = {
        RESULT_ID_NOT_TEXT_VIEW: "This item is not a text view.",
        RESULT_ID_NULL_URL:
            "The link \"{link_text}\" has no URL. Links need an absolute URL so that "
            "screen readers can open them.",
        RESULT_ID_RELATIVE_LINK:
            "The link \"{link_text}\" points to the relative URL \"{url}\". Links need an "
            "absolute URL so that screen readers can open them.",
        RESULT_ID_CLICKABLE_SPAN:
            "The link \"{link_text}\" is not a URL link. Screen readers on this platform "
            "cannot activate it; use a URL link instead.",
        RESULT_ID_VERSION_NOT_APPLICABLE:
            "This check only applies to Android versions before 8.0.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        sdk_version = hierarchy.display.sdk_version
        if sdk_version is not None and sdk_version >= self.APPLICABLE_UNTIL_SDK_VERSION:
            yield self.result(ResultType.NOT_RUN, None, self.RESULT_ID_VERSION_NOT_APPLICABLE)
            return

        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.class_name_endswith(*TEXT_VIEW_CLASS_NAMES):
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_TEXT_VIEW)
                continue
            for span in element.clickable_spans:
                link_text = span.text_of(element.text)
                if span.kind == SPAN_CLICKABLE:
                    yield self.result(ResultType.ERROR, element, self.RESULT_ID_CLICKABLE_SPAN,
                                      link_text=link_text)
                elif span.url is None:
                    yield self.result(ResultType.ERROR, element, self.RESULT_ID_NULL_URL,
                                      link_text=link_text)
                elif not urlparse(span.url).scheme:
                    yield self.result(ResultType.ERROR, element, self.RESULT_ID_RELATIVE_LINK,
                                      link_text=link_text, url=span.url)


@register_check
class DuplicateClickableBoundsCheck(AccessibilityCheck):
    """Clickable items stacked on identical bounds confuse screen reader users"""

    check_id = "duplicate_clickable_bounds"
    title = "Duplicate clickable items"
    category = CheckCategory.IMPLEMENTATION

    RESULT_ID_SAME_BOUNDS = 1

    messages = {
        RESULT_ID_SAME_BOUNDS:
            "This {action} item has the same on-screen location {bounds} as "
            "{conflicting_count} other item(s) with those properties.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        groups: Dict[tuple, List[Element]] = {}
        for element in hierarchy.active_window.all_elements():
            if not element.visible or not element.important_for_accessibility:
                continue
            if not (element.clickable or element.long_clickable):
                continue
            key = (element.bounds, element.clickable, element.long_clickable)
            groups.setdefault(key, []).append(element)

        scope = set(id(e) for e in from_root.self_and_descendants()) if from_root else None
        results = []
        for elements in groups.values():
            if len(elements) < 2:
                continue
            culprit = next((e for e in elements if scope is None or id(e) in scope), None)
            if culprit is None:
                continue
            results.append(self.result(
                ResultType.ERROR, culprit, self.RESULT_ID_SAME_BOUNDS,
                action=self._action_string(culprit),
                bounds=culprit.bounds.to_short_string(),
                conflicting_count=len(elements) - 1,
                clickable=culprit.clickable,
                long_clickable=culprit.long_clickable))
        return _sorted_by_tree_order(results, hierarchy)

    @staticmethod
    def _action_string(element: Element) -> str:
        if element.clickable and element.long_clickable:
            return "clickable and long-clickable"
        return "clickable" if element.clickable else "long-clickable"


@register_check
class RedundantDescriptionCheck(AccessibilityCheck):
    """Labels should not repeat the control type screen readers already announce"""

    check_id = "redundant_description"
    title = "Item type or state in label"
    category = CheckCategory.CONTENT_LABELING

    REDUNDANT_WORDS = ("button",)

    RESULT_ID_ENGLISH_LOCALE_ONLY = 1
    RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY = 2
    RESULT_ID_NO_CONTENT_DESC = 3
    RESULT_ID_CONTENT_DESC_ENDS_WITH_VIEW_TYPE = 4

    messages = {
        RESULT_ID_ENGLISH_LOCALE_ONLY: "This check only runs in English locales.",
        RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY: MESSAGE_NOT_IMPORTANT,
        RESULT_ID_NO_CONTENT_DESC: "This item has no content description.",
        RESULT_ID_CONTENT_DESC_ENDS_WITH_VIEW_TYPE:
            "This item's content description \"{content_description}\" contains the item's "
            "type \"{redundant_word}\". Screen readers already announce the type.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        if not hierarchy.locale.lower().startswith("en"):
            yield self.result(ResultType.NOT_RUN, None, self.RESULT_ID_ENGLISH_LOCALE_ONLY)
            return

        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.important_for_accessibility:
                yield self.result(ResultType.NOT_RUN, element,
                                  self.RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY)
                continue
            description = element.content_description
            if not description:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NO_CONTENT_DESC)
                continue
            for word in self.REDUNDANT_WORDS:
                if word in description.lower():
                    yield self.result(ResultType.WARNING, element,
                                      self.RESULT_ID_CONTENT_DESC_ENDS_WITH_VIEW_TYPE,
                                      content_description=description, redundant_word=word)


@register_check
class ImageContrastCheck(_ColorSamplingMixin, AccessibilityCheck):
    """Images need a 3:1 contrast against their background"""

    check_id = "image_contrast"
    title = "Image contrast"
    category = CheckCategory.LOW_CONTRAST

    RESULT_ID_NOT_VISIBLE = 1
    RESULT_ID_NOT_IMAGEVIEW = 2
    RESULT_ID_NOT_ENABLED = 3
    RESULT_ID_IMAGE_CONTRAST_NOT_SUFFICIENT = 4
    RESULT_ID_CUSTOMIZED_IMAGE_CONTRAST_NOT_SUFFICIENT = 5

    messages = {
        RESULT_ID_NOT_VISIBLE: MESSAGE_NOT_VISIBLE,
        RESULT_ID_NOT_IMAGEVIEW: "This item is not an image.",
        RESULT_ID_NOT_ENABLED: "This item is not enabled.",
        RESULT_ID_IMAGE_CONTRAST_NOT_SUFFICIENT:
            "The image's contrast ratio is {contrast_ratio:.2f}. This ratio is based on an "
            "estimated foreground color of {foreground_color} and an estimated background "
            "color of {background_color}. Consider increasing this ratio to "
            "{required_contrast_ratio:.2f} or greater.",
        RESULT_ID_CUSTOMIZED_IMAGE_CONTRAST_NOT_SUFFICIENT:
            "The image's contrast ratio is {contrast_ratio:.2f}. This ratio is based on an "
            "estimated foreground color of {foreground_color} and an estimated background "
            "color of {background_color}. Consider increasing this ratio to "
            "{required_contrast_ratio:.2f} or greater, as configured for this check.",
        **_ColorSamplingMixin.sampling_messages,
    }

    def run_check(self, hierarchy, parameters, from_root):
        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.visible:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_VISIBLE)
                continue
            if not element.class_name_endswith(*IMAGE_VIEW_CLASS_NAMES):
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_IMAGEVIEW)
                continue
            if not element.enabled:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_ENABLED)
                continue

            sample, not_run = self.sample_colors(element, parameters)
            if sample is None:
                yield not_run
                continue

            custom = parameters.custom_image_contrast_ratio
            required = custom if custom is not None else CONTRAST_RATIO_WCAG_LARGE_TEXT
            low = self.low_contrast_colors(sample, required)
            if not low:
                continue
            lowest_color, lowest_ratio = min(low, key=lambda pair: pair[1])
            yield self.result(
                ResultType.WARNING, element,
                (self.RESULT_ID_CUSTOMIZED_IMAGE_CONTRAST_NOT_SUFFICIENT if custom is not None
                 else self.RESULT_ID_IMAGE_CONTRAST_NOT_SUFFICIENT),
                contrast_ratio=lowest_ratio,
                foreground_color=to_hex_string(lowest_color),
                background_color=to_hex_string(sample.background_color),
                required_contrast_ratio=required)


@register_check
class ClassNameCheck(AccessibilityCheck):
    """Screen readers describe items by well-known framework class names"""

    check_id = "class_name"
    title = "Item type label"
    category = CheckCategory.IMPLEMENTATION

    VALID_UI_PACKAGE_NAMES = (
        "android.app",
        "android.appwidget",
        "android.inputmethodservice",
        "android.support",
        "android.view",
        "android.webkit",
        "android.widget",
    )

    RESULT_ID_NOT_VISIBLE = 1
    RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY = 2
    RESULT_ID_CLASS_NAME_UNKNOWN = 3
    RESULT_ID_CLASS_NAME_IS_EMPTY = 4
    RESULT_ID_CLASS_NAME_NOT_SUPPORTED = 5

    messages = {
        RESULT_ID_NOT_VISIBLE: MESSAGE_NOT_VISIBLE,
        RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY: MESSAGE_NOT_IMPORTANT,
        RESULT_ID_CLASS_NAME_UNKNOWN: "The class name of this item is unknown.",
        RESULT_ID_CLASS_NAME_IS_EMPTY:
            "This item has an empty class name, so screen readers cannot describe its type.",
        RESULT_ID_CLASS_NAME_NOT_SUPPORTED:
            "This item's class name \"{class_name}\" is not a framework type known to "
            "screen readers, so its type may not be announced.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.important_for_accessibility:
                yield self.result(ResultType.NOT_RUN, element,
                                  self.RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY)
            elif not element.visible:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_VISIBLE)
            elif element.class_name is None:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_CLASS_NAME_UNKNOWN)
            elif not element.class_name:
                yield self.result(ResultType.WARNING, element, self.RESULT_ID_CLASS_NAME_IS_EMPTY)
            elif not element.class_name.startswith(self.VALID_UI_PACKAGE_NAMES):
                yield self.result(ResultType.WARNING, element,
                                  self.RESULT_ID_CLASS_NAME_NOT_SUPPORTED,
                                  class_name=element.class_name)


class _TraversalCycle(Exception):
    pass


@register_check
class TraversalOrderCheck(AccessibilityCheck):
    """Explicit traversal-before/after constraints must not loop or contradict"""

    check_id = "traversal_order"
    title = "Traversal order"
    category = CheckCategory.IMPLEMENTATION

    RESULT_ID_NOT_VISIBLE = 1
    RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY = 2
    RESULT_ID_TRAVERSAL_BEFORE_CYCLE = 3
    RESULT_ID_TRAVERSAL_AFTER_CYCLE = 4
    RESULT_ID_TRAVERSAL_OVER_CONSTRAINED = 5

    messages = {
        RESULT_ID_NOT_VISIBLE: MESSAGE_NOT_VISIBLE,
        RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY: MESSAGE_NOT_IMPORTANT,
        RESULT_ID_TRAVERSAL_BEFORE_CYCLE:
            "This item's traversal-before constraints form a cycle, which can make "
            "screen reader navigation unpredictable.",
        RESULT_ID_TRAVERSAL_AFTER_CYCLE:
            "This item's traversal-after constraints form a cycle, which can make "
            "screen reader navigation unpredictable.",
        RESULT_ID_TRAVERSAL_OVER_CONSTRAINED:
            "This item's traversal-before and traversal-after constraints contradict "
            "each other.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.visible:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_VISIBLE)
                continue
            if not element.important_for_accessibility:
                yield self.result(ResultType.NOT_RUN, element,
                                  self.RESULT_ID_NOT_IMPORTANT_FOR_ACCESSIBILITY)
                continue

            try:
                before_chain = self._chain(hierarchy, element, 'traversal_before')
            except _TraversalCycle:
                yield self.result(ResultType.WARNING, element,
                                  self.RESULT_ID_TRAVERSAL_BEFORE_CYCLE)
                continue
            try:
                after_chain = self._chain(hierarchy, element, 'traversal_after')
            except _TraversalCycle:
                yield self.result(ResultType.WARNING, element,
                                  self.RESULT_ID_TRAVERSAL_AFTER_CYCLE)
                continue

            overlap = set(before_chain) & set(after_chain)
            overlap.discard(element.element_id)
            if overlap:
                yield self.result(ResultType.WARNING, element,
                                  self.RESULT_ID_TRAVERSAL_OVER_CONSTRAINED,
                                  conflicting_ids=sorted(overlap))

    @staticmethod
    def _chain(hierarchy: Hierarchy, element: Element, attribute: str) -> List[int]:
        """Element ids reached by following ``attribute`` links from ``element``"""
        chain = [element.element_id]
        current = hierarchy.element_by_id(getattr(element, attribute))
        while current is not None:
            if current.element_id in chain:
                raise _TraversalCycle()
            chain.append(current.element_id)
            current = hierarchy.element_by_id(getattr(current, attribute))
        return chain


@register_check
class SingleInputFocusCheck(AccessibilityCheck):
    """At most one element of the active window may hold input focus"""

    check_id = "single_input_focus"
    title = "Input focus"
    category = CheckCategory.IMPLEMENTATION
    version = "1.1"

    RESULT_ID_MULTIPLE_INPUT_FOCUS = 1

    messages = {
        RESULT_ID_MULTIPLE_INPUT_FOCUS:
            "This item claims input focus together with {conflicting_count} other item(s); "
            "only one item can hold input focus.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        focused = [element for element in hierarchy.active_window.all_elements()
                   if element.focused]
        if len(focused) < 2:
            return []
        scope = set(id(e) for e in from_root.self_and_descendants()) if from_root else None
        return [self.result(ResultType.ERROR, element, self.RESULT_ID_MULTIPLE_INPUT_FOCUS,
                            conflicting_count=len(focused) - 1)
                for element in focused if scope is None or id(element) in scope]


@register_check
class LinkPurposeUnclearCheck(AccessibilityCheck):
    """Link text should make sense without the text around it"""

    check_id = "link_purpose_unclear"
    title = "Unclear link text"
    category = CheckCategory.CONTENT_LABELING

    ENGLISH_STOPWORDS = frozenset(
        ("click", "tap", "go", "here", "learn", "more", "this", "page", "link", "about"))
    WORD_PATTERN = re.compile(r"\w+")

    RESULT_ID_ENGLISH_LOCALE_ONLY = 1
    RESULT_ID_NOT_TEXT_VIEW = 2
    RESULT_ID_LINK_TEXT_NOT_DESCRIPTIVE = 3

    messages = {
        RESULT_ID_ENGLISH_LOCALE_ONLY: "This check only runs in English locales.",
        RESULT_ID_NOT_TEXT_VIEW: "This item is not a text view.",
        RESULT_ID_LINK_TEXT_NOT_DESCRIPTIVE:
            "The link text \"{link_text}\" may not describe where the link goes. "
            "Consider using text that makes sense on its own.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        if not hierarchy.locale.lower().startswith("en"):
            yield self.result(ResultType.NOT_RUN, None, self.RESULT_ID_ENGLISH_LOCALE_ONLY)
            return

        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.class_name_endswith(*TEXT_VIEW_CLASS_NAMES):
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_TEXT_VIEW)
                continue
            for span in element.clickable_spans:
                link_text = span.text_of(element.text)
                if self.has_only_stopwords(link_text):
                    yield self.result(ResultType.WARNING, element,
                                      self.RESULT_ID_LINK_TEXT_NOT_DESCRIPTIVE,
                                      link_text=link_text)

    @classmethod
    def has_only_stopwords(cls, link_text: str) -> bool:
        """True when every word is a stopword; text without words counts too"""
        return all(word.lower() in cls.ENGLISH_STOPWORDS
                   for word in cls.WORD_PATTERN.findall(link_text))


@register_check
class TextSizeCheck(AccessibilityCheck):
    """
    Text should be sized in sp so that it follows the user's font size setting.

    ``Element.text_size`` is read as the size in sp at the default font
    scale, which equals its size in dp. Text declared in any other unit
    is fixed: below 16dp it is an error, below 28dp a warning. Fixed sizes
    that platform widgets choose themselves (toolbar titles in dip, dialog
    titles and tabs in px) and px sizes in general are reported as NOT_RUN.
    """

    check_id = "text_size"
    title = "Text scaling"
    category = CheckCategory.IMPLEMENTATION

    MIN_TEXT_SIZE_DP = 16
    ADEQUATE_TEXT_SIZE_DP = 28

    DIALOG_TITLE_CLASS_NAME = "com.android.internal.widget.DialogTitle"
    MATERIAL_TAB_LAYOUT_CLASS_NAME = "com.google.android.material.tabs.TabLayout"
    TOOLBAR_CLASS_NAMES = (
        "android.support.v7.widget.Toolbar",
        "android.widget.Toolbar",
        "androidx.appcompat.widget.Toolbar",
    )

    RESULT_ID_NOT_VISIBLE = 1
    RESULT_ID_NOT_TEXT_VIEW = 2
    RESULT_ID_TEXTVIEW_EMPTY = 3
    RESULT_ID_SMALL_FIXED_TEXT_SIZE = 4
    RESULT_ID_FIXED_TEXT_SIZE = 5
    RESULT_ID_TEXT_SIZE_NOT_AVAILABLE = 6
    RESULT_ID_TOOLBAR_TITLE_IN_DIP = 9
    RESULT_ID_DIALOG_TITLE_IN_PX = 10
    RESULT_ID_TAB_IN_PX = 11
    RESULT_ID_TEXT_SIZE_IN_PX = 12

    messages = {
        RESULT_ID_NOT_VISIBLE: MESSAGE_NOT_VISIBLE,
        RESULT_ID_NOT_TEXT_VIEW: "This item is not a text view.",
        RESULT_ID_TEXTVIEW_EMPTY: "This text view has neither text nor a hint.",
        RESULT_ID_SMALL_FIXED_TEXT_SIZE:
            "This item's text size of {estimated_text_size_dp:.0f}dp is set in "
            "{text_size_unit}, so it will not grow with the user's font size setting. "
            "Consider specifying the size in sp.",
        RESULT_ID_FIXED_TEXT_SIZE:
            "This item's text size is set in {text_size_unit}, so it will not grow with "
            "the user's font size setting. Consider specifying the size in sp.",
        RESULT_ID_TEXT_SIZE_NOT_AVAILABLE: "The text size of this item is unknown.",
        RESULT_ID_TOOLBAR_TITLE_IN_DIP:
            "This toolbar title has a fixed size in dip chosen by the toolbar.",
        RESULT_ID_DIALOG_TITLE_IN_PX:
            "This dialog title has a fixed size in px chosen by the platform.",
        RESULT_ID_TAB_IN_PX: "This tab label has a fixed size in px chosen by the tab layout.",
        RESULT_ID_TEXT_SIZE_IN_PX:
            "This item's text size is set in px, so whether it scales cannot be determined.",
    }

    def run_check(self, hierarchy, parameters, from_root):
        for element in self.elements_to_evaluate(hierarchy, from_root):
            if not element.visible:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_VISIBLE)
            elif not element.class_name_endswith(*TEXT_VIEW_CLASS_NAMES):
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_NOT_TEXT_VIEW)
            elif not element.text and not element.hint_text:
                yield self.result(ResultType.NOT_RUN, element, self.RESULT_ID_TEXTVIEW_EMPTY)
            elif element.text_size is None or element.text_size_unit is None:
                yield self.result(ResultType.NOT_RUN, element,
                                  self.RESULT_ID_TEXT_SIZE_NOT_AVAILABLE)
            elif element.text_size_unit != "sp":
                result = self._check_fixed_size(element)
                if result is not None:
                    yield result

    def _check_fixed_size(self, element: Element) -> Optional[CheckResult]:
        size_dp = element.text_size
        if size_dp >= self.ADEQUATE_TEXT_SIZE_DP:
            return None

        unit = element.text_size_unit
        parent = element.parent
        if unit == "dip" and parent is not None and parent.class_name in self.TOOLBAR_CLASS_NAMES:
            result_type, result_id = ResultType.NOT_RUN, self.RESULT_ID_TOOLBAR_TITLE_IN_DIP
        elif unit == "px" and element.class_name == self.DIALOG_TITLE_CLASS_NAME:
            result_type, result_id = ResultType.NOT_RUN, self.RESULT_ID_DIALOG_TITLE_IN_PX
        elif unit == "px" and self._in_material_tab_layout(element):
            result_type, result_id = ResultType.NOT_RUN, self.RESULT_ID_TAB_IN_PX
        elif unit == "px":
            result_type, result_id = ResultType.NOT_RUN, self.RESULT_ID_TEXT_SIZE_IN_PX
        elif size_dp < self.MIN_TEXT_SIZE_DP:
            result_type, result_id = ResultType.ERROR, self.RESULT_ID_SMALL_FIXED_TEXT_SIZE
        else:
            result_type, result_id = ResultType.WARNING, self.RESULT_ID_FIXED_TEXT_SIZE
        return self.result(result_type, element, result_id,
                           text_size_unit=unit, estimated_text_size_dp=size_dp)

    def _in_material_tab_layout(self, element: Element) -> bool:
        return any(e.class_name == self.MATERIAL_TAB_LAYOUT_CLASS_NAME
                   for e in (element, *element.ancestors()))
