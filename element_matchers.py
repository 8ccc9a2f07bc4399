"""
Hamcrest matchers over Elements.

Value matchers and combinators come from PyHamcrest; this module adds the
element features they are applied to. Every matcher can describe what it
expects and explain why a given element did not match, e.g.::

    matcher = with_child(with_text("OK"))
    if not matcher.matches(dialog):
        raise AssertionError(f"Expected {matcher} but {explain_mismatch(matcher, dialog)}")
"""

import re
from typing import Any, Callable, Optional

from hamcrest import all_of, any_of, anything, contains_string, empty, equal_to, is_not, none
from hamcrest import matches_regexp
from hamcrest.core.base_matcher import BaseMatcher
from hamcrest.core.description import Description
from hamcrest.core.helpers.wrap_matcher import wrap_matcher
from hamcrest.core.matcher import Matcher
from hamcrest.core.string_description import StringDescription

from models import Element

__all__ = [
    "Matcher",
    "all_of",
    "any_of",
    "anything",
    "contains_string",
    "equal_to",
    "is_not",
    "matches_regexp",
    "is_empty",
    "explain_mismatch",
    "find_all",
    "with_text",
    "with_content_description",
    "with_test_tag",
    "with_class_name",
    "with_element_id",
    "is_clickable",
    "is_enabled",
    "is_focusable",
    "is_checkable",
    "is_visible",
    "with_child",
]


def is_empty() -> Matcher:
    """Absent or zero-length value"""
    return any_of(none(), empty())


def _value_matcher(expected: Any) -> Matcher:
    # A compiled pattern has to match the whole value
    if isinstance(expected, re.Pattern):
        return matches_regexp(re.compile(rf"\A(?:{expected.pattern})\Z", expected.flags))
    return wrap_matcher(expected)


class ElementFeatureMatcher(BaseMatcher):
    """Applies a value matcher to one feature of an element"""

    def __init__(self, value_matcher: Matcher, feature_name: str,
                 extractor: Callable[[Element], Any]):
        self.value_matcher = value_matcher
        self.feature_name = feature_name
        self.extractor = extractor

    def feature_value_of(self, element: Element) -> Any:
        return self.extractor(element)

    def _matches(self, item) -> bool:
        if not isinstance(item, Element):
            return False
        try:
            return self.value_matcher.matches(self.feature_value_of(item))
        except TypeError:
            # Pattern matchers reject absent values by raising
            return False

    def describe_to(self, description: Description) -> None:
        description.append_text(f"Element with {self.feature_name} ") \
            .append_description_of(self.value_matcher)

    def describe_mismatch(self, item, mismatch_description: Description) -> None:
        if not isinstance(item, Element):
            super().describe_mismatch(item, mismatch_description)
            return
        mismatch_description.append_text(f"{self.feature_name} ")
        self.value_matcher.describe_mismatch(self.feature_value_of(item), mismatch_description)


class WithStringFeatureMatcher(ElementFeatureMatcher):

    def feature_value_of(self, element: Element) -> Optional[str]:
        value = self.extractor(element)
        return None if value is None else str(value)


class WithBooleanFeatureMatcher(ElementFeatureMatcher):
    pass


class WithChildMatcher(BaseMatcher):
    """Matches if at least one immediate child matches the inner matcher"""

    def __init__(self, child_matcher: Matcher):
        self.child_matcher = child_matcher

    def _matches(self, item) -> bool:
        if not isinstance(item, Element):
            return False
        return any(self.child_matcher.matches(child) for child in item.children)

    def describe_to(self, description: Description) -> None:
        description.append_text("Element has child matching: ") \
            .append_description_of(self.child_matcher)

    def describe_mismatch(self, item, mismatch_description: Description) -> None:
        if not isinstance(item, Element):
            super().describe_mismatch(item, mismatch_description)
            return
        if not item.children:
            mismatch_description.append_text("Element has no children")
            return
        mismatch_description.append_text("mismatches were: [")
        for index, child in enumerate(item.children):
            if index:
                mismatch_description.append_text(", ")
            self.child_matcher.describe_mismatch(child, mismatch_description)
        mismatch_description.append_text("]")


def with_text(expected) -> Matcher:
    """``expected`` is a string, a compiled pattern or a matcher for the text"""
    return WithStringFeatureMatcher(_value_matcher(expected), "text", lambda e: e.text)


def with_content_description(expected) -> Matcher:
    return WithStringFeatureMatcher(_value_matcher(expected), "contentDescription",
                                    lambda e: e.content_description)


def with_test_tag(expected) -> Matcher:
    return WithStringFeatureMatcher(_value_matcher(expected), "testTag", lambda e: e.test_tag)


def with_class_name(expected) -> Matcher:
    return WithStringFeatureMatcher(_value_matcher(expected), "className",
                                    lambda e: e.class_name)


def with_element_id(element_id: int) -> Matcher:
    return ElementFeatureMatcher(equal_to(element_id), "id", lambda e: e.element_id)


def _flag(name: str) -> Matcher:
    return WithBooleanFeatureMatcher(equal_to(True), name, lambda e: getattr(e, name))


def is_clickable() -> Matcher:
    return _flag("clickable")


def is_enabled() -> Matcher:
    return _flag("enabled")


def is_focusable() -> Matcher:
    return _flag("focusable")


def is_checkable() -> Matcher:
    return _flag("checkable")


def is_visible() -> Matcher:
    return _flag("visible")


def with_child(child_matcher: Matcher) -> Matcher:
    if child_matcher is None:
        raise ValueError("child_matcher is required")
    return WithChildMatcher(child_matcher)


def explain_mismatch(matcher: Matcher, item) -> str:
    description = StringDescription()
    matcher.describe_mismatch(item, description)
    return str(description)


def find_all(elements, matcher: Matcher, limit: Optional[int] = None):
    """Elements from ``elements`` (in order) that satisfy ``matcher``"""
    found = []
    for element in elements:
        if matcher.matches(element):
            found.append(element)
            if limit is not None and len(found) >= limit:
                break
    return found
