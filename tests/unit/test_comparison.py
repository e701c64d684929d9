"""
Unit Tests for the Comparator

Tests for time-window comparison, patient ranking, and change helpers.
"""
import copy
import math
import pytest
from datetime import datetime, timezone

from rehab_analytics.core.comparison import (
    ComparisonMode,
    ComparisonResult,
    ImprovementClass,
    SortOptions,
    calculate_change_rate,
    classify_improvement,
    compare_patients,
    compare_periods,
    compare_time_ranges,
    percentage_change,
    sort_patient_comparisons,
)
from rehab_analytics.core.grouping import PatientGroup
from rehab_analytics.core.scoring import Dimension
from rehab_analytics.utils import InvalidPeriodError


@pytest.fixture
def patient_with_overall(make_record):
    """PatientGroup whose single record has the requested overall score.

    Four dimensions sit at an integer base level b and concentration takes
    up the rest: overall = (concentration + 4b) / 5.
    """
    def _build(patient_id: str, overall: float) -> PatientGroup:
        base = min(5, max(1, math.ceil((overall * 5 - 5) / 4 - 1e-9)))
        concentration = overall * 5 - 4 * base
        record = make_record(
            patient_id=patient_id,
            duration=60 * concentration,
            motivation=(base,) * 4,
            achievement_areas=("x",) * (2 * base),
            severity=6 - base,
            social=(base, base),
        )
        return PatientGroup(patient_id=patient_id, records=(record,), patient_name=f"Name {patient_id}")
    return _build


class TestTimeComparison:
    """Tests for compare_time_ranges."""

    def test_identical_windows_show_no_change(self, make_uniform_record, make_record):
        records = [make_uniform_record(2), make_uniform_record(4, "P-2"), make_record(duration=45)]
        result = compare_time_ranges(records, copy.deepcopy(records))

        for dimension in Dimension:
            assert result.difference[dimension] == 0
            assert result.change_rate[dimension] == 0
            assert result.significance[dimension] is False

    def test_zero_previous_baseline(self, make_uniform_record):
        """Empty previous window: averages are 0, change rate is 100, never inf/nan."""
        result = compare_time_ranges([make_uniform_record(3)], [])

        assert result.previous_average.concentration == 0
        assert result.current_average.concentration == 3
        assert result.change_rate[Dimension.CONCENTRATION] == 100
        assert result.difference[Dimension.CONCENTRATION] == 3
        assert result.significance[Dimension.CONCENTRATION] is True

    def test_both_windows_empty(self):
        result = compare_time_ranges([], [])
        assert all(rate == 0 for rate in result.change_rate.values())
        assert not any(result.significance.values())

    def test_difference_and_rate(self, make_uniform_record):
        result = compare_time_ranges([make_uniform_record(4)], [make_uniform_record(2)])

        assert result.difference[Dimension.OVERALL] == pytest.approx(2.0)
        assert result.change_rate[Dimension.OVERALL] == pytest.approx(100.0)
        assert result.change_rate[Dimension.SOCIAL] == pytest.approx(100.0)

    def test_significance_thresholds(self, make_record):
        # Social moves by 0.5 exactly (not significant), concentration by 0.6
        previous = [make_record(duration=120, social=(3, 3))]
        current = [make_record(duration=156, social=(3, 4))]
        result = compare_time_ranges(current, previous)

        assert result.difference[Dimension.SOCIAL] == pytest.approx(0.5)
        assert result.significance[Dimension.SOCIAL] is False
        assert result.difference[Dimension.CONCENTRATION] == pytest.approx(0.6)
        assert result.significance[Dimension.CONCENTRATION] is True
        # Overall moves by 0.22 → under the 0.3 overall threshold
        assert result.difference[Dimension.OVERALL] == pytest.approx(0.22)
        assert result.significance[Dimension.OVERALL] is False

    def test_overall_threshold_is_lower(self, make_record):
        previous = [make_record(duration=120, social=(3, 3), severity=3)]
        current = [make_record(duration=144, social=(3, 4), severity=2)]
        result = compare_time_ranges(current, previous)

        # 0.4 + 0.5 + 1.0 over five dimensions
        assert result.difference[Dimension.OVERALL] == pytest.approx(0.38)
        assert result.significance[Dimension.OVERALL] is True

    def test_inputs_not_mutated(self, make_uniform_record):
        current = [make_uniform_record(3)]
        previous = [make_uniform_record(2)]
        snapshot = (list(current), list(previous))
        compare_time_ranges(current, previous)
        assert (current, previous) == snapshot

    def test_aware_and_naive_windows_compare(self, make_uniform_record):
        current = [make_uniform_record(4, assessed_at=datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc))]
        comparison, _ = compare_periods(current, "month", datetime(2024, 3, 20))
        assert comparison.current_count == 1

    def test_counts(self, make_uniform_record):
        result = compare_time_ranges([make_uniform_record(3)] * 2, [make_uniform_record(2)])
        assert (result.current_count, result.previous_count) == (2, 1)


class TestComparePeriods:
    """Tests for period bucketing + comparison."""

    def test_month_over_month(self, make_uniform_record):
        records = [
            make_uniform_record(2, assessed_at=datetime(2024, 2, 10)),
            make_uniform_record(4, assessed_at=datetime(2024, 3, 5)),
            make_uniform_record(5, assessed_at=datetime(2024, 1, 5)),   # outside both windows
        ]
        comparison, ranges = compare_periods(records, "month", datetime(2024, 3, 15))

        assert ranges.current.label == "This month"
        assert comparison.current_count == 1
        assert comparison.previous_count == 1
        assert comparison.difference[Dimension.OVERALL] == pytest.approx(2.0)

    def test_custom_needs_ranges(self, make_uniform_record):
        with pytest.raises(InvalidPeriodError):
            compare_periods([make_uniform_record(3)], "custom", datetime(2024, 3, 15))


class TestPatientComparison:
    """Tests for compare_patients."""

    def test_scenario_b(self, patient_with_overall):
        groups = [patient_with_overall("P-low", 3.1), patient_with_overall("P-high", 4.2)]
        results = compare_patients(groups)

        assert [r.patient_id for r in results] == ["P-high", "P-low"]
        assert results[0].average_scores.overall == pytest.approx(4.2)
        assert (results[0].rank, results[0].percentile) == (1, 100)
        assert (results[1].rank, results[1].percentile) == (2, 50)

    def test_order_independent(self, patient_with_overall):
        a = patient_with_overall("A", 3.4)
        b = patient_with_overall("B", 2.8)

        assert compare_patients([a, b])[0].patient_id == "A"
        assert compare_patients([b, a])[0].patient_id == "A"

    def test_ties_keep_input_order(self, patient_with_overall):
        """Equal overall scores: no tie-break rule, input order decides."""
        a = patient_with_overall("A", 3.0)
        b = patient_with_overall("B", 3.0)

        assert [r.patient_id for r in compare_patients([a, b])] == ["A", "B"]
        assert [r.patient_id for r in compare_patients([b, a])] == ["B", "A"]

    def test_group_average_is_unweighted(self, make_uniform_record):
        """Each patient counts once regardless of assessment count."""
        many = PatientGroup("P-many", tuple(make_uniform_record(5, "P-many") for _ in range(4)))
        one = PatientGroup("P-one", (make_uniform_record(1, "P-one"),))
        results = compare_patients([many, one])

        # Group average = (5 + 1) / 2 = 3, not (4*5 + 1) / 5
        assert results[0].deviation_from_group[Dimension.OVERALL] == pytest.approx(2.0)
        assert results[1].deviation_from_group[Dimension.OVERALL] == pytest.approx(-2.0)
        assert results[0].assessment_count == 4

    def test_percentiles_for_three(self, patient_with_overall):
        groups = [patient_with_overall(p, s) for p, s in (("A", 3.0), ("B", 4.0), ("C", 3.5))]
        results = compare_patients(groups)

        assert [r.patient_id for r in results] == ["B", "C", "A"]
        assert [r.percentile for r in results] == [100, 67, 33]

    def test_percentile_rounds_half_up(self, patient_with_overall):
        groups = [patient_with_overall(str(i), 2.6 + 0.2 * i) for i in range(8)]
        results = compare_patients(groups)
        # rank 8 of 8 → 12.5 → 13
        assert results[-1].percentile == 13

    def test_empty(self):
        assert compare_patients([]) == []

    def test_inputs_not_mutated(self, make_uniform_record):
        groups = [
            PatientGroup("P-1", (make_uniform_record(2, "P-1"), make_uniform_record(3, "P-1"))),
            PatientGroup("P-2", (make_uniform_record(5, "P-2"),)),
        ]
        snapshot = copy.deepcopy(groups)

        results = compare_patients(groups)

        assert groups == snapshot
        assert [g.patient_id for g in groups] == ["P-1", "P-2"]
        assert results[0].patient_id == "P-2"

    def test_deviations_sum_to_zero(self, patient_with_overall):
        groups = [patient_with_overall(p, s) for p, s in (("A", 3.0), ("B", 4.0), ("C", 3.6))]
        results = compare_patients(groups)
        for dimension in Dimension:
            assert sum(r.deviation_from_group[dimension] for r in results) == pytest.approx(0.0, abs=1e-9)

    def test_sort_for_display(self, patient_with_overall):
        results = compare_patients([patient_with_overall("A", 3.0), patient_with_overall("B", 4.0)])

        by_rank_desc = sort_patient_comparisons(results, SortOptions(field="rank", descending=True))
        assert [r.patient_id for r in by_rank_desc] == ["A", "B"]

        by_success_asc = sort_patient_comparisons(results, SortOptions(field="success", descending=False))
        assert [r.patient_id for r in by_success_asc] == ["A", "B"]


class TestChangeHelpers:

    def test_percentage_change_guarded(self):
        assert percentage_change(0, 3) == 100
        assert percentage_change(0, 0) == 0
        assert percentage_change(0, -1) == 0
        assert percentage_change(2, 3) == pytest.approx(50.0)

    def test_change_rate_rounded(self):
        assert calculate_change_rate(3, 4) == 33.3
        assert calculate_change_rate(0, 4) == 100

    @pytest.mark.parametrize("rate,expected", [
        (25, ImprovementClass.SIGNIFICANT_IMPROVEMENT),
        (20, ImprovementClass.SIGNIFICANT_IMPROVEMENT),
        (12, ImprovementClass.MODERATE_IMPROVEMENT),
        (5, ImprovementClass.SLIGHT_IMPROVEMENT),
        (0, ImprovementClass.STABLE),
        (-5, ImprovementClass.STABLE),
        (-7, ImprovementClass.SLIGHT_DECLINE),
        (-15, ImprovementClass.MODERATE_DECLINE),
        (-20, ImprovementClass.MODERATE_DECLINE),
        (-30, ImprovementClass.SIGNIFICANT_DECLINE),
    ])
    def test_classify_improvement(self, rate, expected):
        assert classify_improvement(rate) is expected


class TestComparisonResult:

    def test_tagged_time(self, make_uniform_record):
        result = ComparisonResult.of_time(compare_time_ranges([make_uniform_record(3)], []))

        assert result.mode is ComparisonMode.TIME
        assert result.data_points == 1
        out = result.to_dict()
        assert out["mode"] == "time"
        assert out["time_comparison"]["change_rate"]["concentration"] == 100
        assert "patient_comparisons" not in out

    def test_dimension_selection_keeps_overall(self, patient_with_overall):
        result = ComparisonResult.of_patients(compare_patients([patient_with_overall("A", 3.0)]))
        out = result.to_dict([Dimension.MOTIVATION])

        assert set(out["patient_comparisons"][0]["average_scores"]) == {"motivation", "overall"}

    def test_empty_patient_result(self):
        result = ComparisonResult.of_patients([])
        assert result.is_empty
        assert result.to_dict() == {"mode": "patient", "patient_comparisons": []}
