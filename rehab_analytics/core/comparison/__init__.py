"""
Comparison Layer

Period-over-period and cross-patient comparison of normalised scores.

Usage:
    from rehab_analytics.core.comparison import compare_time_ranges, compare_patients

    delta = compare_time_ranges(current_records, previous_records)
    ranking = compare_patients(patient_groups)
"""
from .base import (
    ComparisonMode,
    ComparisonResult,
    ImprovementClass,
    PatientComparison,
    ProgressAnalysis,
    TimeComparison,
    TrendDirection,
)
from .change import calculate_change_rate, classify_improvement, percentage_change
from .comparator import (
    SortOptions,
    compare_patients,
    compare_periods,
    compare_time_ranges,
    sort_patient_comparisons,
)

__all__ = [
    "ComparisonMode",
    "ComparisonResult",
    "ImprovementClass",
    "PatientComparison",
    "ProgressAnalysis",
    "TimeComparison",
    "TrendDirection",
    "calculate_change_rate",
    "classify_improvement",
    "percentage_change",
    "SortOptions",
    "compare_patients",
    "compare_periods",
    "compare_time_ranges",
    "sort_patient_comparisons",
]
