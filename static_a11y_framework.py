import logging
import os
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np

import hierarchy_checks  # noqa: F401  registers the built-in checks
from accessibility_check import (
    REGISTRY,
    AccessibilityCheck,
    CheckParameters,
    ColorSource,
    resolve_checks,
)
from check_results import (
    CheckResult,
    ResultType,
    SuppressionRule,
    apply_suppressions,
    count_by_type,
    partition_actionable,
)
from errors import MalformedHierarchyError
from models import Hierarchy
from settings import Settings

RESULT_ID_CHECK_FAILED = 0


class StaticAccessibilityAnalyzer:
    def __init__(self, hierarchy: Hierarchy, color_source: Optional[ColorSource] = None,
                 settings: Optional[Settings] = None, image_name: str = "screen"):
        """
        Initialize analyzer with a hierarchy snapshot

        Args:
            hierarchy: Snapshot to evaluate
            color_source: Pixel accessor for contrast checks, if a screenshot exists
            settings: Run defaults; environment-independent defaults if omitted
            image_name: Base name for marked screenshots
        """
        self.logger = logging.getLogger(__name__)
        self.hierarchy = hierarchy
        self.color_source = color_source
        self.settings = settings or Settings()
        self.image_name = image_name
        self.results: List[CheckResult] = []

    def _run_one(self, check: AccessibilityCheck,
                 parameters: CheckParameters) -> List[CheckResult]:
        try:
            return check.run(self.hierarchy, parameters)
        except MalformedHierarchyError:
            raise
        except Exception as e:
            self.logger.error(f"Check {check.check_id} failed: {str(e)}", exc_info=True)
            return [CheckResult(
                check_id=check.check_id,
                result_type=ResultType.NOT_RUN,
                message=f"The check could not be completed: {e}",
                result_id=RESULT_ID_CHECK_FAILED,
            )]

    def run_checks(self, selection=None, parameters: Optional[CheckParameters] = None,
                   suppressions: Optional[Sequence[SuppressionRule]] = None,
                   max_workers: Optional[int] = None) -> List[CheckResult]:
        """
        Run a preset (enum or name) or an explicit list of check ids.

        Results come back in check registration order, each check's results
        in tree order, whatever the number of workers.
        """
        if selection is None:
            selection = self.settings.preset
        if parameters is None:
            parameters = self.settings.check_parameters(self.color_source)
        if suppressions is None:
            suppressions = self.settings.suppression_rules()
        if max_workers is None:
            max_workers = self.settings.max_workers

        checks = resolve_checks(selection)
        self.logger.info(f"Running {len(checks)} check(s) on {len(self.hierarchy)} elements")

        if max_workers > 1 and len(checks) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = [executor.submit(self._run_one, check, parameters) for check in checks]
                per_check = [future.result() for future in futures]
        else:
            per_check = [self._run_one(check, parameters) for check in checks]

        results = [result for check_results in per_check for result in check_results]
        self.results = apply_suppressions(results, self.hierarchy, suppressions)
        return self.results

    def generate_report(self, results: Optional[List[CheckResult]] = None) -> Dict[str, Any]:
        """Generate comprehensive accessibility report"""
        if results is None:
            results = self.results
        actionable, _ = partition_actionable(results)

        results_by_check: Dict[str, List[CheckResult]] = defaultdict(list)
        for result in results:
            results_by_check[result.check_id].append(result)

        return {
            'timestamp': datetime.now().isoformat(),
            'image_dimensions': self._image_dimensions(),
            'total_results': len(results),
            'total_issues': len(actionable),
            'counts_by_type': count_by_type(results),
            'summary': {
                check_id: {
                    'count': len(check_results),
                    **{k: v for k, v in count_by_type(check_results).items() if v},
                }
                for check_id, check_results in results_by_check.items()
            },
            'issues': [self._issue_dict(result) for result in actionable],
            'results': [result.to_dict() for result in results],
        }

    def _image_dimensions(self) -> List[int]:
        size = getattr(self.color_source, 'size', None)
        if size is not None:
            return list(size)
        display = self.hierarchy.display
        return [display.width_px or 0, display.height_px or 0]

    def _issue_dict(self, result: CheckResult) -> Dict[str, Any]:
        issue = result.to_dict()
        element = self.hierarchy.element_by_id(result.element_id)
        if element is not None:
            issue['element_info'] = {
                'class_name': element.class_name,
                'test_tag': element.test_tag,
                'text': element.text,
            }
            issue['bounds'] = element.bounds.as_tuple()
        return issue

    def mark_issues_on_image(self, image: np.ndarray, bounds: List[Tuple[int, int, int, int]],
                             color: Tuple[int, int, int], output_path: str) -> None:
        """
        Mark issues on a copy of the input image with rectangles.

        Args:
            image: The input image as a numpy array.
            bounds: (left, top, right, bottom) of every element to mark.
            color: The color of the rectangle (BGR format).
            output_path: Where the marked image is written.
        """
        marked_image = image.copy()
        for left, top, right, bottom in bounds:
            cv2.rectangle(marked_image, (left, top), (right, bottom), color, 4)
        cv2.imwrite(output_path, marked_image)

    def mark_issues(self, results: Optional[List[CheckResult]] = None,
                    image: Optional[np.ndarray] = None,
                    output_dir: Optional[str] = None) -> List[str]:
        """
        Write one marked copy of the screenshot per check category that has
        ERROR or WARNING results. Returns the written paths.
        """
        if results is None:
            results = self.results
        if image is None:
            image = getattr(self.color_source, 'screenshot', None)
        if image is None:
            raise ValueError("No screenshot available to mark")
        output_dir = output_dir or self.settings.marked_output_dir

        colors = {
            "labeling": (255, 0, 0),          # Blue
            "touch target": (0, 0, 255),      # Red
            "contrast": (238, 130, 238),      # Violet
            "implementation": (0, 165, 255),  # Orange
        }

        actionable, _ = partition_actionable(results)
        bounds_by_category: Dict[str, List[Tuple[int, int, int, int]]] = defaultdict(list)
        for result in actionable:
            element = self.hierarchy.element_by_id(result.element_id)
            if element is None:
                continue
            category = (REGISTRY.get(result.check_id).category.value
                        if result.check_id in REGISTRY else "other")
            bounds_by_category[category].append(element.bounds.as_tuple())

        os.makedirs(output_dir, exist_ok=True)
        written = []
        for category, category_bounds in bounds_by_category.items():
            color = colors.get(category, (0, 255, 0))  # Default to green if category not found
            output_path = os.path.join(
                output_dir, f"{self.image_name}_{category.replace(' ', '_')}.png")
            self.mark_issues_on_image(image, category_bounds, color, output_path)
            written.append(output_path)
        return written

    def run_analysis(self) -> Dict[str, Any]:
        """Run the configured checks and report"""
        try:
            self.run_checks()
            return self.generate_report()
        except Exception as e:
            self.logger.error(f"Analysis failed: {str(e)}")
            raise
