"""Tests for the run loop, report and issue marking."""

import os

import numpy as np
import pytest

from accessibility_check import (
    REGISTRY,
    AccessibilityCheck,
    AccessibilityCheckPreset,
    CheckCategory,
    check_ids_for_preset,
)
from check_results import ResultType, SuppressionRule, filter_by_check, filter_by_type
from errors import MalformedHierarchyError
from models import Rect
from settings import Settings
from static_a11y_framework import StaticAccessibilityAnalyzer


@pytest.fixture
def hierarchy(element_factory, screen, hierarchy_factory):
    """A screen with a few typical defects"""
    return hierarchy_factory(screen(
        element_factory(class_name="android.widget.ImageButton", clickable=True,
                        bounds=Rect(100, 100, 130, 130)),
        element_factory(class_name="android.widget.Button", clickable=True, text="OK",
                        bounds=Rect(100, 200, 300, 300)),
        element_factory(class_name="android.widget.Button", clickable=True, text="OK",
                        bounds=Rect(100, 400, 300, 500)),
        element_factory(class_name="android.widget.TextView", text="Faint",
                        text_color=0xFFAAAAAA, background_color=0xFFFFFFFF,
                        bounds=Rect(100, 600, 300, 650)),
    ))


class TestRunChecks:

    def test_results_follow_registration_then_tree_order(self, hierarchy):
        results = StaticAccessibilityAnalyzer(hierarchy).run_checks(AccessibilityCheckPreset.LATEST)
        order = {check_id: index for index, check_id in enumerate(REGISTRY.ids())}
        check_positions = [order[r.check_id] for r in results]
        assert check_positions == sorted(check_positions)

        preorder = [e.element_id for e in hierarchy.all_elements()]
        for check_id in REGISTRY.ids():
            ids = [r.element_id for r in filter_by_check(results, check_id)
                   if r.element_id is not None]
            assert ids == sorted(ids, key=preorder.index)

    def test_thread_pool_gives_the_same_results(self, hierarchy):
        analyzer = StaticAccessibilityAnalyzer(hierarchy)
        serial = analyzer.run_checks("LATEST", max_workers=1)
        parallel = analyzer.run_checks("LATEST", max_workers=4)
        assert parallel == serial

    def test_repeated_runs_are_identical(self, hierarchy):
        first = StaticAccessibilityAnalyzer(hierarchy).run_checks(AccessibilityCheckPreset.LATEST)
        second = StaticAccessibilityAnalyzer(hierarchy).run_checks(AccessibilityCheckPreset.LATEST)
        assert first == second

    def test_preset_limits_checks(self, hierarchy):
        results = StaticAccessibilityAnalyzer(hierarchy).run_checks("VERSION_1_0")
        assert {r.check_id for r in results} <= set(
            check_ids_for_preset(AccessibilityCheckPreset.VERSION_1_0))

    def test_explicit_check_ids(self, hierarchy):
        results = StaticAccessibilityAnalyzer(hierarchy).run_checks(["touch_target_size"])
        assert {r.check_id for r in results} == {"touch_target_size"}

    def test_suppression_for_one_element(self, hierarchy):
        analyzer = StaticAccessibilityAnalyzer(hierarchy)
        raw = analyzer.run_checks(["duplicate_speakable_text", "touch_target_size"],
                                  suppressions=[])
        small_button = filter_by_type(filter_by_check(raw, "touch_target_size"),
                                      ResultType.ERROR)[0]

        suppressed = analyzer.run_checks(
            ["duplicate_speakable_text", "touch_target_size"],
            suppressions=[SuppressionRule(check_id="touch_target_size",
                                          element_ids=(small_button.element_id,))])
        changed = [(before, after) for before, after in zip(raw, suppressed) if before != after]
        assert len(changed) == 1
        before, after = changed[0]
        assert after.result_type == ResultType.SUPPRESSED
        assert after.original_type == before.result_type == ResultType.ERROR

    def test_settings_supply_defaults(self, hierarchy):
        settings = Settings(preset="VERSION_1_0", suppressed_checks=["touch_target_size"])
        results = StaticAccessibilityAnalyzer(hierarchy, settings=settings).run_checks()
        touch = filter_by_check(results, "touch_target_size")
        assert touch
        assert not filter_by_type(touch, ResultType.ERROR, ResultType.WARNING)
        assert filter_by_type(touch, ResultType.SUPPRESSED)


class ExplodingCheck(AccessibilityCheck):
    check_id = "exploding"
    category = CheckCategory.IMPLEMENTATION

    def __init__(self, error):
        self.error = error

    def run_check(self, hierarchy, parameters, from_root):
        raise self.error


class TestCheckFailures:

    @pytest.fixture
    def exploding(self):
        def register(error):
            REGISTRY._checks["exploding"] = ExplodingCheck(error)
        yield register
        REGISTRY._checks.pop("exploding", None)

    def test_failing_check_becomes_not_run(self, hierarchy, exploding):
        exploding(RuntimeError("boom"))
        results = StaticAccessibilityAnalyzer(hierarchy).run_checks(
            ["exploding", "touch_target_size"])

        failure = filter_by_check(results, "exploding")
        assert len(failure) == 1
        assert failure[0].result_type == ResultType.NOT_RUN
        assert failure[0].element_id is None
        assert "boom" in failure[0].message
        assert filter_by_type(filter_by_check(results, "touch_target_size"), ResultType.ERROR)

    def test_malformed_hierarchy_aborts(self, hierarchy, exploding):
        exploding(MalformedHierarchyError("broken tree"))
        with pytest.raises(MalformedHierarchyError):
            StaticAccessibilityAnalyzer(hierarchy).run_checks(["exploding"])


class TestReport:

    def test_report_counts(self, hierarchy):
        analyzer = StaticAccessibilityAnalyzer(hierarchy)
        results = analyzer.run_checks(["touch_target_size", "text_contrast"])
        report = analyzer.generate_report(results)

        assert report['total_results'] == len(results)
        assert report['total_issues'] == len(filter_by_type(
            results, ResultType.ERROR, ResultType.WARNING))
        assert report['counts_by_type']['ERROR'] == 2
        assert report['summary']['touch_target_size']['ERROR'] == 1
        assert report['image_dimensions'] == [1080, 1920]
        issue = report['issues'][0]
        assert issue['element_info']['class_name'] == "android.widget.ImageButton"
        assert issue['bounds'] == (100, 100, 130, 130)

    def test_run_analysis(self, hierarchy):
        report = StaticAccessibilityAnalyzer(hierarchy).run_analysis()
        assert report['total_issues'] > 0
        assert 'timestamp' in report


class TestMarkIssues:

    def test_writes_one_image_per_category(self, hierarchy, tmp_path):
        analyzer = StaticAccessibilityAnalyzer(hierarchy, image_name="login")
        results = analyzer.run_checks(["touch_target_size", "text_contrast"])
        image = np.full((1920, 1080, 3), 255, dtype=np.uint8)

        written = analyzer.mark_issues(results, image, str(tmp_path))

        assert sorted(os.path.basename(path) for path in written) == [
            "login_contrast.png", "login_touch_target.png"]
        assert all(os.path.exists(path) for path in written)
        assert (image == 255).all()

    def test_requires_a_screenshot(self, hierarchy):
        with pytest.raises(ValueError):
            StaticAccessibilityAnalyzer(hierarchy).mark_issues([])
