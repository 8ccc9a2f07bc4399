"""
Snapshot producers: build a Hierarchy from a uiautomator XML dump or from a
JSON hierarchy document.

JSON document layout::

    {
      "locale": "en",
      "display": {"density": 2.0, "width_px": 1080, "height_px": 1920, "sdk_version": 25},
      "windows": [{"window_id": 0, "root": 1, "active": true}],
      "elements": [
        {"id": 1, "class_name": "android.widget.FrameLayout",
         "bounds": [0, 0, 1080, 1920], "children": [2, 3]},
        {"id": 2, "class_name": "android.widget.Button", "text": "OK",
         "bounds": [40, 40, 240, 160], "clickable": true,
         "text_color": "#FF000000", "background_color": "#FFFFFFFF"},
        {"id": 3, "class_name": "android.widget.TextView", "text": "Read the terms",
         "bounds": [40, 200, 640, 260], "text_size": 14, "text_size_unit": "sp",
         "clickable_spans": [{"start": 9, "end": 14, "kind": "url",
                              "url": "https://example.com/terms"}]}
      ]
    }

``text_size`` is the size in sp; ``text_size_unit`` is the unit the app
declared it in (one of ``px``, ``dip``, ``sp``, ``pt``, ``in``, ``mm``).
Span offsets index into the element's ``text``.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Set, Tuple

from color_utils import parse_color
from errors import AccessibilityCheckError, MalformedHierarchyError
from models import (
    SPAN_CLICKABLE,
    SPAN_URL,
    TEXT_SIZE_UNITS,
    ClickableSpan,
    DisplayInfo,
    Element,
    Hierarchy,
    Rect,
    Window,
)

logger = logging.getLogger(__name__)

_LANDSCAPE_ROTATIONS = ('1', '3')


def parse_bounds(bounds_str: str) -> Rect:
    """Parse bounds string '[left,top][right,bottom]' into a Rect"""
    try:
        coords = bounds_str.strip().strip('[]').split('][')
        left, top = map(int, coords[0].split(','))
        right, bottom = map(int, coords[1].split(','))
    except (ValueError, IndexError) as e:
        raise MalformedHierarchyError(f"Failed to parse bounds '{bounds_str}': {e}") from e
    return Rect(left, top, right, bottom)


def _flag(node: ET.Element, name: str, default: bool = False) -> bool:
    value = node.get(name)
    if value is None:
        return default
    return value == 'true'


def _optional(node: ET.Element, name: str) -> Optional[str]:
    # uiautomator writes empty strings for unset attributes
    value = node.get(name)
    return value if value else None


def parse_uiautomator_xml(layout_xml: str, screen_size: Optional[Tuple[int, int]] = None,
                          density: float = 1.0, locale: str = "en") -> Hierarchy:
    """
    Build a Hierarchy from a ``uiautomator dump`` document.

    Element ids are assigned in document order. Each top-level node becomes
    a window; nodes from an input method package become ``input_method``
    windows and the first other window is the active one.

    Args:
        layout_xml: The XML layout of the screen
        screen_size: (width, height) of the screenshot in pixels, if known
        density: Display density in pixels per dp
        locale: Locale of the UI text
    """
    try:
        layout_tree = ET.fromstring(layout_xml)
    except ET.ParseError as e:
        raise MalformedHierarchyError(f"Layout XML is not well formed: {e}") from e

    next_id = [0]

    def extract_element(node: ET.Element) -> Element:
        """Recursively convert nodes, children first"""
        element_id = next_id[0]
        next_id[0] += 1
        children = [extract_element(child) for child in node if child.tag == 'node']
        checkable = _flag(node, 'checkable')
        return Element(
            element_id=element_id,
            class_name=_optional(node, 'class'),
            text=_optional(node, 'text'),
            content_description=_optional(node, 'content-desc'),
            test_tag=_optional(node, 'resource-id'),
            hint_text=_optional(node, 'hint'),
            bounds=parse_bounds(node.get('bounds', '[0,0][0,0]')),
            visible=_flag(node, 'visible-to-user', default=True),
            enabled=_flag(node, 'enabled', default=True),
            clickable=_flag(node, 'clickable'),
            long_clickable=_flag(node, 'long-clickable'),
            focusable=_flag(node, 'focusable'),
            focused=_flag(node, 'focused'),
            checkable=checkable,
            checked=_flag(node, 'checked') if checkable else None,
            scrollable=_flag(node, 'scrollable'),
            important_for_accessibility=_flag(node, 'important-for-accessibility', default=True),
            children=children,
        )

    top_level = [node for node in layout_tree if node.tag == 'node']
    if layout_tree.tag == 'node':
        top_level = [layout_tree]
    if not top_level:
        raise MalformedHierarchyError("Layout XML contains no nodes")

    windows: List[Window] = []
    for index, node in enumerate(top_level):
        package = node.get('package', '')
        window_type = "input_method" if 'inputmethod' in package else "application"
        windows.append(Window(window_id=index, root=extract_element(node),
                              window_type=window_type))

    active_index = next((i for i, w in enumerate(windows) if w.window_type != "input_method"), 0)
    windows = [Window(window_id=w.window_id, root=w.root, active=(i == active_index),
                      window_type=w.window_type, bounds=w.root.bounds)
               for i, w in enumerate(windows)]

    width, height = screen_size if screen_size else (None, None)
    orientation = ("landscape" if layout_tree.get('rotation') in _LANDSCAPE_ROTATIONS
                   else "portrait")
    display = DisplayInfo(density=density, width_px=width, height_px=height,
                          orientation=orientation)
    hierarchy = Hierarchy.build(windows, display, locale)
    logger.debug(f"Parsed {len(hierarchy)} elements in {len(windows)} window(s)")
    return hierarchy


def _rect_from(value: Any, where: str) -> Rect:
    if value is None:
        return Rect(0, 0, 0, 0)
    try:
        if isinstance(value, str):
            return parse_bounds(value)
        if isinstance(value, dict):
            return Rect(int(value['left']), int(value['top']),
                        int(value['right']), int(value['bottom']))
        left, top, right, bottom = (int(v) for v in value)
        return Rect(left, top, right, bottom)
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedHierarchyError(f"Invalid bounds for {where}: {value!r}") from e


def _color_from(value: Any, where: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        return parse_color(value)
    except (AccessibilityCheckError, AttributeError) as e:
        raise MalformedHierarchyError(f"Invalid color for {where}: {value!r}") from e


def _bool_from(value: Any, where: str) -> bool:
    # Only real JSON booleans; "false" must not read as True
    if not isinstance(value, bool):
        raise MalformedHierarchyError(f"Expected true or false for {where}, got {value!r}")
    return value


def _spans_from(value: Any, text: Optional[str], where: str) -> List[ClickableSpan]:
    spans = []
    for raw in value or []:
        try:
            span = ClickableSpan(start=int(raw['start']), end=int(raw['end']),
                                 kind=raw.get('kind', SPAN_URL), url=raw.get('url'))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedHierarchyError(f"Invalid clickable span for {where}: {raw!r}") from e
        if span.kind not in (SPAN_URL, SPAN_CLICKABLE):
            raise MalformedHierarchyError(f"Unknown span kind {span.kind!r} for {where}")
        if not 0 <= span.start <= span.end <= len(text or ""):
            raise MalformedHierarchyError(
                f"Span [{span.start}, {span.end}) lies outside the text of {where}")
        spans.append(span)
    return spans


def _unit_from(value: Any, where: str) -> Optional[str]:
    if value is None:
        return None
    if value not in TEXT_SIZE_UNITS:
        raise MalformedHierarchyError(
            f"Unknown text size unit {value!r} for {where}, expected one of {TEXT_SIZE_UNITS}")
    return value


_BOOLEAN_FIELDS = (
    'visible', 'enabled', 'clickable', 'long_clickable', 'focusable', 'focused',
    'checkable', 'scrollable', 'editable', 'important_for_accessibility', 'text_bold',
)
_OPTIONAL_FIELDS = (
    'class_name', 'text', 'content_description', 'test_tag', 'hint_text',
    'text_size', 'labeled_by', 'traversal_before', 'traversal_after',
)


def hierarchy_from_dict(document: Dict[str, Any]) -> Hierarchy:
    """
    Build a Hierarchy from a JSON hierarchy document (see module docstring).

    Raises:
        MalformedHierarchyError: unknown or missing element ids, an element
            reached twice or through a cycle, a repeated element id, invalid
            bounds or colors, flags that are not JSON booleans, or invalid
            display metrics
    """
    raw_elements: Dict[int, Dict[str, Any]] = {}
    try:
        for raw in document.get('elements', []):
            element_id = int(raw['id'])
            if element_id in raw_elements:
                raise MalformedHierarchyError(f"Duplicate element id {element_id}")
            raw_elements[element_id] = raw
        raw_windows = document['windows']
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedHierarchyError(f"Invalid hierarchy document: {e}") from e

    building: Set[int] = set()
    built: Dict[int, Element] = {}

    def build(element_id: int) -> Element:
        if element_id not in raw_elements:
            raise MalformedHierarchyError(f"Unresolvable element id {element_id}")
        if element_id in building:
            raise MalformedHierarchyError(f"Cycle through element {element_id}")
        if element_id in built:
            raise MalformedHierarchyError(f"Element {element_id} has more than one parent")
        raw = raw_elements[element_id]
        building.add(element_id)
        children = [build(int(child_id)) for child_id in raw.get('children', [])]
        building.discard(element_id)

        where = f"element {element_id}"
        kwargs = {name: raw[name] for name in _OPTIONAL_FIELDS if name in raw}
        kwargs.update({name: _bool_from(raw[name], f"{where} {name}")
                       for name in _BOOLEAN_FIELDS if name in raw})
        if raw.get('checked') is not None:
            kwargs['checked'] = _bool_from(raw['checked'], f"{where} checked")
        element = Element(
            element_id=element_id,
            bounds=_rect_from(raw.get('bounds'), where),
            text_color=_color_from(raw.get('text_color'), where),
            background_color=_color_from(raw.get('background_color'), where),
            text_size_unit=_unit_from(raw.get('text_size_unit'), where),
            clickable_spans=_spans_from(raw.get('clickable_spans'), raw.get('text'), where),
            children=children,
            **kwargs,
        )
        built[element_id] = element
        return element

    windows = []
    for index, raw_window in enumerate(raw_windows):
        try:
            root_id = int(raw_window['root'])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedHierarchyError(f"Window {index} has no valid root") from e
        windows.append(Window(
            window_id=int(raw_window.get('window_id', index)),
            root=build(root_id),
            active=_bool_from(raw_window.get('active', False), f"window {index} active"),
            window_type=raw_window.get('window_type', "application"),
            bounds=_rect_from(raw_window['bounds'], f"window {index}")
            if 'bounds' in raw_window else None,
        ))

    orphans = set(raw_elements) - set(built)
    if orphans:
        logger.warning(f"Ignoring {len(orphans)} element(s) not reachable from any window")

    raw_display = document.get('display') or {}
    try:
        density = float(raw_display.get('density', 1.0))
        sdk_version = raw_display.get('sdk_version')
        sdk_version = int(sdk_version) if sdk_version is not None else None
    except (TypeError, ValueError) as e:
        raise MalformedHierarchyError(f"Invalid display metrics: {e}") from e
    display = DisplayInfo(
        density=density,
        width_px=raw_display.get('width_px'),
        height_px=raw_display.get('height_px'),
        orientation=raw_display.get('orientation', "portrait"),
        sdk_version=sdk_version,
    )
    return Hierarchy.build(windows, display, document.get('locale', "en"))
