"""Tests for the check contract, registry and presets."""

import pytest

import hierarchy_checks  # noqa: F401
from accessibility_check import (
    REGISTRY,
    AccessibilityCheck,
    AccessibilityCheckPreset,
    CheckCategory,
    CheckRegistry,
    check_ids_for_preset,
    resolve_checks,
)
from check_results import ResultType


class EveryElementCheck(AccessibilityCheck):
    check_id = "every_element"
    title = "Every element"
    category = CheckCategory.IMPLEMENTATION
    messages = {1: "Saw element {element_id}."}

    def run_check(self, hierarchy, parameters, from_root):
        for element in self.elements_to_evaluate(hierarchy, from_root):
            yield self.result(ResultType.INFO, element, 1, element_id=element.element_id)


class TestAccessibilityCheck:

    def test_run_formats_messages(self, element_factory, hierarchy_factory):
        root = element_factory(element_id=1, children=[element_factory(element_id=2)])
        results = EveryElementCheck().run(hierarchy_factory(root))
        assert [r.message for r in results] == ["Saw element 1.", "Saw element 2."]
        assert results[0].metadata == {"element_id": 1}

    def test_from_root_limits_scope(self, element_factory, hierarchy_factory):
        child = element_factory(element_id=2)
        root = element_factory(element_id=1, children=[child])
        hierarchy = hierarchy_factory(root)
        results = EveryElementCheck().run(hierarchy, from_root=child)
        assert [r.element_id for r in results] == [2]

    def test_unknown_result_id_is_a_bug(self, element_factory):
        with pytest.raises(KeyError):
            EveryElementCheck().result(ResultType.INFO, element_factory(), 99)


class TestRegistry:

    def test_register_rejects_duplicates_and_missing_ids(self):
        registry = CheckRegistry()
        registry.register(EveryElementCheck())
        with pytest.raises(ValueError):
            registry.register(EveryElementCheck())

        class Anonymous(EveryElementCheck):
            check_id = ""

        with pytest.raises(ValueError):
            registry.register(Anonymous())

    def test_get_unknown_id(self):
        with pytest.raises(KeyError):
            CheckRegistry().get("missing")

    def test_checks_for_deduplicates_in_registration_order(self):
        checks = REGISTRY.checks_for(["text_contrast", "speakable_text_present", "text_contrast"])
        assert [c.check_id for c in checks] == ["speakable_text_present", "text_contrast"]

    def test_resolve_checks_with_custom_registry(self):
        registry = CheckRegistry()
        check = registry.register(EveryElementCheck())
        assert resolve_checks(["every_element"], registry) == [check]
        assert resolve_checks(AccessibilityCheckPreset.NO_CHECKS, registry) == []


class TestPresets:

    def test_registry_order_matches_prerelease_preset(self):
        assert REGISTRY.ids() == check_ids_for_preset(AccessibilityCheckPreset.PRERELEASE)

    def test_versions_strictly_extend_each_other(self):
        ordered = [AccessibilityCheckPreset.VERSION_1_0, AccessibilityCheckPreset.VERSION_2_0,
                   AccessibilityCheckPreset.VERSION_3_0, AccessibilityCheckPreset.LATEST,
                   AccessibilityCheckPreset.PRERELEASE]
        for smaller, larger in zip(ordered, ordered[1:]):
            small_ids, large_ids = check_ids_for_preset(smaller), check_ids_for_preset(larger)
            assert large_ids[:len(small_ids)] == small_ids
            assert len(large_ids) > len(small_ids)

    def test_prerelease_adds_checks_outside_stable_presets(self):
        latest = check_ids_for_preset(AccessibilityCheckPreset.LATEST)
        prerelease = check_ids_for_preset(AccessibilityCheckPreset.PRERELEASE)
        assert prerelease[len(latest):] == ("link_purpose_unclear", "text_size")

    def test_clickable_span_joins_version_2_0(self):
        assert check_ids_for_preset("VERSION_2_0")[5:] == (
            "clickable_span", "duplicate_clickable_bounds", "redundant_description")

    def test_presets_by_name(self):
        assert check_ids_for_preset("version_1_0") == (
            "speakable_text_present", "editable_content_desc", "touch_target_size",
            "duplicate_speakable_text", "text_contrast")
        assert check_ids_for_preset("NO_CHECKS") == ()
        with pytest.raises(ValueError):
            check_ids_for_preset("VERSION_9_0")

    def test_every_preset_id_is_registered(self):
        for preset in AccessibilityCheckPreset:
            assert all(check_id in REGISTRY for check_id in check_ids_for_preset(preset))
