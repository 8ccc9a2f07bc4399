"""
Result taxonomy, suppression and aggregation.

Aggregation helpers never re-run checks: they are order-preserving filters
over results that were already computed.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from element_matchers import Matcher
from models import Hierarchy

logger = logging.getLogger(__name__)


class ResultType(str, Enum):
    ERROR = "ERROR"          # confirmed defect
    WARNING = "WARNING"      # likely defect, needs human judgement
    INFO = "INFO"            # informational only
    NOT_RUN = "NOT_RUN"      # the check could not evaluate
    SUPPRESSED = "SUPPRESSED"


ACTIONABLE_TYPES = (ResultType.ERROR, ResultType.WARNING)


@dataclass(frozen=True)
class CheckResult:
    """
    Outcome of one check against one element, or against the whole
    hierarchy when ``element_id`` is None.

    The element is referenced by id so results can be compared and kept
    independently of any in-memory tree.
    """
    check_id: str
    result_type: ResultType
    message: str
    element_id: Optional[int] = None
    result_id: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False)
    original_type: Optional[ResultType] = None

    @property
    def is_actionable(self) -> bool:
        return self.result_type in ACTIONABLE_TYPES

    @property
    def is_suppressed(self) -> bool:
        return self.result_type == ResultType.SUPPRESSED

    def suppressed(self) -> 'CheckResult':
        """Copy reported as SUPPRESSED that remembers the original type"""
        return replace(self, result_type=ResultType.SUPPRESSED,
                       original_type=self.result_type)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'check_id': self.check_id,
            'type': self.result_type.value,
            'message': self.message,
            'element_id': self.element_id,
            'result_id': self.result_id,
            'metadata': dict(self.metadata),
        }
        if self.original_type is not None:
            data['original_type'] = self.original_type.value
        return data


@dataclass(frozen=True)
class SuppressionRule:
    """
    Downgrades matching ERROR/WARNING results to SUPPRESSED.

    Every criterion that is set must hold: ``check_id`` equals the result's
    check, the element is one of ``element_ids``, and ``matcher`` matches
    the element. A rule with only ``check_id`` suppresses that check for
    every element, including hierarchy-level results.
    """
    check_id: Optional[str] = None
    matcher: Optional[Matcher] = None
    element_ids: Tuple[int, ...] = ()
    reason: str = ""

    def applies_to(self, result: CheckResult, hierarchy: Optional[Hierarchy]) -> bool:
        if self.check_id is not None and self.check_id != result.check_id:
            return False
        if self.element_ids and result.element_id not in self.element_ids:
            return False
        if self.matcher is not None:
            element = hierarchy.element_by_id(result.element_id) if hierarchy else None
            if element is None or not self.matcher.matches(element):
                return False
        return True


def apply_suppressions(results: Iterable[CheckResult], hierarchy: Optional[Hierarchy],
                       rules: Sequence[SuppressionRule]) -> List[CheckResult]:
    """Return a new list where results hit by any rule are SUPPRESSED"""
    output = []
    for result in results:
        if result.is_actionable and any(rule.applies_to(result, hierarchy) for rule in rules):
            logger.debug(f"Suppressing {result.check_id} result for element {result.element_id}")
            output.append(result.suppressed())
        else:
            output.append(result)
    return output


def filter_by_type(results: Iterable[CheckResult], *types: ResultType) -> List[CheckResult]:
    wanted = set(types)
    return [result for result in results if result.result_type in wanted]


def filter_by_check(results: Iterable[CheckResult], *check_ids: str) -> List[CheckResult]:
    wanted = set(check_ids)
    return [result for result in results if result.check_id in wanted]


def partition_actionable(
        results: Iterable[CheckResult]) -> Tuple[List[CheckResult], List[CheckResult]]:
    """Split into (ERROR + WARNING, everything else), each keeping input order"""
    actionable, others = [], []
    for result in results:
        (actionable if result.is_actionable else others).append(result)
    return actionable, others


def results_for_element(results: Iterable[CheckResult], element_id: int) -> List[CheckResult]:
    return [result for result in results if result.element_id == element_id]


def count_by_type(results: Iterable[CheckResult]) -> Dict[str, int]:
    counts = Counter(result.result_type for result in results)
    return {result_type.value: counts.get(result_type, 0) for result_type in ResultType}


def has_errors(results: Iterable[CheckResult]) -> bool:
    return any(result.result_type == ResultType.ERROR for result in results)
