"""Tests for element matchers."""

import re

import pytest
from hamcrest import assert_that

from element_matchers import (
    all_of,
    any_of,
    contains_string,
    explain_mismatch,
    find_all,
    is_clickable,
    is_empty,
    is_not,
    matches_regexp,
    with_child,
    with_class_name,
    with_content_description,
    with_element_id,
    with_test_tag,
    with_text,
)


class TestFeatureMatchers:

    def test_plain_string_means_equality(self, element_factory):
        assert with_text("OK").matches(element_factory(text="OK"))
        assert not with_text("OK").matches(element_factory(text="OK!"))

    def test_compiled_pattern_must_match_fully(self, element_factory):
        matcher = with_content_description(re.compile(r"Photo \d+"))
        assert matcher.matches(element_factory(content_description="Photo 12"))
        assert not matcher.matches(element_factory(content_description="Photo 12 of 30"))

    def test_hamcrest_value_matchers(self, element_factory):
        element = element_factory(content_description="Photo 12 of 30")
        assert with_content_description(matches_regexp(r"\d+ of")).matches(element)
        assert with_content_description(contains_string("of 30")).matches(element)

    def test_absent_values_do_not_match(self, element_factory):
        element = element_factory()
        assert not with_text(contains_string("x")).matches(element)
        assert not with_test_tag(matches_regexp(".*")).matches(element)

    def test_empty_matcher_accepts_absent_values(self, element_factory):
        assert with_text(is_empty()).matches(element_factory())
        assert with_text(is_empty()).matches(element_factory(text=""))
        assert not with_text(is_empty()).matches(element_factory(text="OK"))

    def test_description_and_mismatch(self, element_factory):
        matcher = with_text("OK")
        assert str(matcher) == "Element with text 'OK'"
        assert explain_mismatch(matcher, element_factory(text="Cancel")) == "text was 'Cancel'"

    def test_flag_and_id_matchers(self, element_factory):
        element = element_factory(element_id=42, clickable=True)
        assert is_clickable().matches(element)
        assert with_element_id(42).matches(element)
        assert not with_element_id(43).matches(element)

    def test_non_elements_do_not_match(self):
        assert not with_text("OK").matches("OK")

    def test_usable_with_assert_that(self, element_factory):
        assert_that(element_factory(text="OK"), with_text("OK"))
        with pytest.raises(AssertionError, match="text was 'Cancel'"):
            assert_that(element_factory(text="Cancel"), with_text("OK"))


class TestCombinators:

    def test_all_any_not(self, element_factory):
        button = element_factory(class_name="android.widget.Button", text="OK", clickable=True)
        assert all_of(with_text("OK"), is_clickable()).matches(button)
        assert not all_of(with_text("OK"), is_not(is_clickable())).matches(button)
        assert any_of(with_text("Cancel"), with_class_name("android.widget.Button")).matches(button)

    def test_all_of_reports_first_failure(self, element_factory):
        element = element_factory(text="OK", clickable=False)
        mismatch = explain_mismatch(all_of(with_text("OK"), is_clickable()), element)
        assert mismatch.endswith("clickable was <False>")
        assert "text" not in mismatch


class TestWithChild:

    def test_matches_when_one_of_three_children_matches(self, element_factory):
        parent = element_factory(children=[
            element_factory(text="Cancel"),
            element_factory(text="OK"),
            element_factory(text="Help"),
        ])
        assert with_child(with_text("OK")).matches(parent)

    def test_description(self):
        assert str(with_child(with_text("OK"))) == (
            "Element has child matching: Element with text 'OK'")

    def test_mismatch_lists_every_child(self, element_factory):
        parent = element_factory(children=[
            element_factory(text="Cancel"),
            element_factory(text="Retry"),
            element_factory(text="Help"),
        ])
        matcher = with_child(with_text("OK"))
        assert not matcher.matches(parent)
        assert explain_mismatch(matcher, parent) == (
            "mismatches were: [text was 'Cancel', text was 'Retry', text was 'Help']")

    def test_only_immediate_children_are_considered(self, element_factory):
        grandchild = element_factory(text="OK")
        parent = element_factory(children=[element_factory(children=[grandchild])])
        assert not with_child(with_text("OK")).matches(parent)

    def test_no_children(self, element_factory):
        leaf = element_factory()
        assert not with_child(with_text("OK")).matches(leaf)
        assert explain_mismatch(with_child(with_text("OK")), leaf) == "Element has no children"

    def test_requires_inner_matcher(self):
        with pytest.raises(ValueError):
            with_child(None)


def test_find_all_keeps_order_and_limit(element_factory):
    elements = [element_factory(text=text) for text in ("a", "OK", "b", "OK")]
    assert find_all(elements, with_text("OK")) == [elements[1], elements[3]]
    assert find_all(elements, with_text("OK"), limit=1) == [elements[1]]
