"""
Progress Analysis

Per-patient least-squares trend fitting over time-ordered assessments.

Usage:
    from rehab_analytics.core.progress import analyze_progress

    analysis = analyze_progress(records, patient_id="P-001")
    print(analysis.trends[Dimension.OVERALL], analysis.reliability)
"""
from .analyzer import (
    analyze_progress,
    analyze_progress_many,
    calculate_reliability,
    classify_trend,
    coefficient_of_determination,
    linear_regression_slope,
)

__all__ = [
    "analyze_progress",
    "analyze_progress_many",
    "calculate_reliability",
    "classify_trend",
    "coefficient_of_determination",
    "linear_regression_slope",
]
