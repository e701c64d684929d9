"""
Grouping & Filtering

Narrow and partition assessment record collections ahead of comparison.
"""
from .base import (
    ComparisonFilters,
    GroupBy,
    GroupOptions,
    PatientGroup,
    ScoreBand,
    UNGROUPED_LABEL,
)
from .operations import (
    apply_comparison_filters,
    exclude_score_outliers,
    filter_by_min_assessments,
    filter_by_patients,
    filter_by_time_range,
    filter_patients_by_min_assessments,
    group_assessments,
    group_by_patient,
    score_band,
)

__all__ = [
    "ComparisonFilters",
    "GroupBy",
    "GroupOptions",
    "PatientGroup",
    "ScoreBand",
    "UNGROUPED_LABEL",
    "apply_comparison_filters",
    "exclude_score_outliers",
    "filter_by_min_assessments",
    "filter_by_patients",
    "filter_by_time_range",
    "filter_patients_by_min_assessments",
    "group_assessments",
    "group_by_patient",
    "score_band",
]
