"""Tests for result classification, suppression and aggregation."""

import pytest

from check_results import (
    CheckResult,
    ResultType,
    SuppressionRule,
    apply_suppressions,
    count_by_type,
    filter_by_check,
    filter_by_type,
    has_errors,
    partition_actionable,
    results_for_element,
)
from element_matchers import with_text


def _result(check_id, result_type, element_id=None):
    return CheckResult(check_id=check_id, result_type=result_type,
                       message=f"{check_id} {result_type.value}", element_id=element_id)


@pytest.fixture
def results():
    return [
        _result("a", ResultType.ERROR, 1),
        _result("a", ResultType.NOT_RUN, 2),
        _result("b", ResultType.WARNING, 1),
        _result("b", ResultType.INFO, 3),
        _result("c", ResultType.ERROR, None),
    ]


class TestAggregation:

    def test_filter_by_type_keeps_order(self, results):
        assert filter_by_type(results, ResultType.ERROR) == [results[0], results[4]]

    def test_filter_by_check(self, results):
        assert filter_by_check(results, "b") == [results[2], results[3]]

    def test_partition_actionable(self, results):
        actionable, others = partition_actionable(results)
        assert actionable == [results[0], results[2], results[4]]
        assert others == [results[1], results[3]]

    def test_results_for_element(self, results):
        assert results_for_element(results, 1) == [results[0], results[2]]

    def test_count_by_type_lists_every_type(self, results):
        assert count_by_type(results) == {
            "ERROR": 2, "WARNING": 1, "INFO": 1, "NOT_RUN": 1, "SUPPRESSED": 0}

    def test_has_errors(self, results):
        assert has_errors(results)
        assert not has_errors(results[1:4])

    def test_to_dict(self):
        data = _result("a", ResultType.ERROR, 5).suppressed().to_dict()
        assert data["type"] == "SUPPRESSED"
        assert data["original_type"] == "ERROR"
        assert data["element_id"] == 5

    def test_results_are_hashable(self):
        first = CheckResult(check_id="a", result_type=ResultType.ERROR, message="m",
                            element_id=1, metadata={"width": 30})
        same = CheckResult(check_id="a", result_type=ResultType.ERROR, message="m",
                           element_id=1, metadata={"width": 30})
        assert hash(first) == hash(same)
        assert len({first, same, first.suppressed()}) == 2


class TestSuppression:

    def test_suppressed_result_keeps_original_type(self):
        result = _result("a", ResultType.WARNING, 1).suppressed()
        assert result.result_type == ResultType.SUPPRESSED
        assert result.original_type == ResultType.WARNING
        assert result.is_suppressed
        assert not result.is_actionable

    def test_rule_for_check_and_element(self, results):
        output = apply_suppressions(results, None, [SuppressionRule(check_id="a", element_ids=(1,))])
        assert output[0].result_type == ResultType.SUPPRESSED
        assert output[1:] == results[1:]

    def test_only_actionable_results_are_suppressed(self, results):
        output = apply_suppressions(results, None, [SuppressionRule(check_id="b")])
        assert output[2].result_type == ResultType.SUPPRESSED
        assert output[3] is results[3]

    def test_returns_new_list(self, results):
        output = apply_suppressions(results, None, [SuppressionRule()])
        assert all(result.is_suppressed for result in filter_by_type(output, ResultType.SUPPRESSED))
        assert results[0].result_type == ResultType.ERROR

    def test_matcher_rule_uses_the_hierarchy(self, element_factory, hierarchy_factory):
        ok = element_factory(element_id=1, text="OK")
        other = element_factory(element_id=2, text="Other")
        hierarchy = hierarchy_factory(element_factory(element_id=10, children=[ok, other]))
        raw = [_result("a", ResultType.ERROR, 1), _result("a", ResultType.ERROR, 2),
               _result("a", ResultType.ERROR, None)]

        output = apply_suppressions(raw, hierarchy, [SuppressionRule(matcher=with_text("OK"))])
        assert [r.result_type for r in output] == [
            ResultType.SUPPRESSED, ResultType.ERROR, ResultType.ERROR]
