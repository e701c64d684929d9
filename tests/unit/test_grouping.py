"""
Unit Tests for Grouping & Filtering
"""
import pytest
from datetime import datetime

from rehab_analytics.core.grouping import (
    ComparisonFilters,
    GroupBy,
    GroupOptions,
    PatientGroup,
    ScoreBand,
    apply_comparison_filters,
    exclude_score_outliers,
    filter_by_patients,
    filter_by_time_range,
    filter_patients_by_min_assessments,
    group_assessments,
    group_by_patient,
    score_band,
)
from rehab_analytics.core.periods import TimeRange
from rehab_analytics.utils import InvalidGroupingError


@pytest.fixture
def mixed_records(make_uniform_record):
    """Three patients across two months, with a mix of score levels."""
    return [
        make_uniform_record(5, "P-1", datetime(2024, 2, 26, 9)),   # Mon
        make_uniform_record(3, "P-2", datetime(2024, 2, 28, 9)),   # Wed same week
        make_uniform_record(2, "P-1", datetime(2024, 3, 4, 9)),    # next Mon
        make_uniform_record(1, "P-3", datetime(2024, 3, 6, 9)),
        make_uniform_record(4, "P-2", datetime(2024, 3, 20, 9)),
    ]


def _flatten(groups):
    return [r for records in groups.values() for r in records]


class TestFiltering:
    """Tests for record filters."""

    def test_time_range_inclusive(self, mixed_records):
        window = TimeRange(datetime(2024, 3, 1), datetime(2024, 3, 6, 9), "early March")
        filtered = filter_by_time_range(mixed_records, window)
        assert [r.patient_id for r in filtered] == ["P-1", "P-3"]

    def test_by_patients_preserves_order(self, mixed_records):
        filtered = filter_by_patients(mixed_records, ["P-2", "P-1"])
        assert filtered == [mixed_records[0], mixed_records[1], mixed_records[2], mixed_records[4]]

    def test_empty_patient_list_keeps_everything(self, mixed_records):
        assert filter_by_patients(mixed_records, []) == mixed_records
        assert filter_by_patients(mixed_records, None) == mixed_records

    def test_min_assessments_on_groups(self, mixed_records):
        groups = group_by_patient(mixed_records)
        kept = filter_patients_by_min_assessments(groups, 2)
        assert [g.patient_id for g in kept] == ["P-1", "P-2"]

    def test_apply_filters_combined(self, mixed_records):
        filters = ComparisonFilters(
            date_range=TimeRange(datetime(2024, 2, 1), datetime(2024, 3, 31), "Feb-Mar"),
            patient_ids=("P-1", "P-3"),
            min_assessments=2,
        )
        filtered = apply_comparison_filters(mixed_records, filters)
        assert filtered == [mixed_records[0], mixed_records[2]]

    def test_no_filters_is_identity_copy(self, mixed_records):
        filtered = apply_comparison_filters(mixed_records, ComparisonFilters())
        assert filtered == mixed_records
        assert filtered is not mixed_records

    def test_outlier_exclusion(self, make_uniform_record):
        records = [make_uniform_record(3, f"P-{i}") for i in range(6)] + [make_uniform_record(1, "P-low")]
        kept = exclude_score_outliers(records)
        assert [r.patient_id for r in kept] == [f"P-{i}" for i in range(6)]

    def test_outlier_exclusion_skips_small_sets(self, make_uniform_record):
        records = [make_uniform_record(3), make_uniform_record(1, "P-2")]
        assert exclude_score_outliers(records) == records


class TestGrouping:
    """Tests for group_assessments."""

    @pytest.mark.parametrize("by", [GroupBy.PATIENT, GroupBy.MONTH, GroupBy.WEEK, GroupBy.SCORE_RANGE])
    def test_every_record_in_exactly_one_group(self, mixed_records, by):
        groups = group_assessments(mixed_records, GroupOptions(by=by))
        flat = _flatten(groups)

        assert len(flat) == len(mixed_records)
        assert sorted(r.id for r in flat) == sorted(r.id for r in mixed_records)

    def test_by_patient(self, mixed_records):
        groups = group_assessments(mixed_records, GroupOptions(by=GroupBy.PATIENT))
        assert list(groups) == ["P-1", "P-2", "P-3"]
        assert len(groups["P-1"]) == 2

    def test_by_month(self, mixed_records):
        groups = group_assessments(mixed_records, GroupOptions(by=GroupBy.MONTH))
        assert {k: len(v) for k, v in groups.items()} == {"2024-02": 2, "2024-03": 3}

    def test_by_week_uses_monday(self, mixed_records):
        groups = group_assessments(mixed_records, GroupOptions(by=GroupBy.WEEK))
        assert list(groups) == ["2024-02-26", "2024-03-04", "2024-03-18"]
        assert len(groups["2024-02-26"]) == 2

    def test_by_score_range(self, mixed_records):
        groups = group_assessments(mixed_records, GroupOptions(by=GroupBy.SCORE_RANGE))
        assert {k: len(v) for k, v in groups.items()} == {
            "excellent": 2, "good": 1, "fair": 1, "poor": 1,
        }

    def test_custom_map_with_unmapped_patients(self, mixed_records):
        options = GroupOptions(by=GroupBy.CUSTOM, custom_groups={"P-1": "morning", "P-2": "morning"})
        groups = group_assessments(mixed_records, options)

        assert len(groups["morning"]) == 4
        assert len(groups["other"]) == 1
        assert len(_flatten(groups)) == len(mixed_records)

    def test_custom_without_map_fails(self, mixed_records):
        with pytest.raises(InvalidGroupingError):
            group_assessments(mixed_records, GroupOptions(by=GroupBy.CUSTOM))

    def test_unknown_grouping_fails(self, mixed_records):
        with pytest.raises(InvalidGroupingError):
            group_assessments(mixed_records, GroupOptions(by="season"))

    def test_group_by_patient_bundles(self, make_uniform_record):
        records = [make_uniform_record(3, "P-1"), make_uniform_record(4, "P-2"), make_uniform_record(2, "P-1")]
        groups = group_by_patient(records)

        assert [g.patient_id for g in groups] == ["P-1", "P-2"]
        assert isinstance(groups[0], PatientGroup)
        assert groups[0].records == (records[0], records[2])


class TestScoreBand:

    @pytest.mark.parametrize("score,band", [
        (5.0, ScoreBand.EXCELLENT),
        (4.0, ScoreBand.EXCELLENT),
        (3.99, ScoreBand.GOOD),
        (3.0, ScoreBand.GOOD),
        (2.5, ScoreBand.FAIR),
        (2.0, ScoreBand.FAIR),
        (1.99, ScoreBand.POOR),
    ])
    def test_bands(self, score, band):
        assert score_band(score) is band
