"""
Statistics Module

Descriptive summaries of score series.
"""
from .descriptive import StatisticalSummary, calculate_basic_statistics, quartile_bounds

__all__ = [
    "StatisticalSummary",
    "calculate_basic_statistics",
    "quartile_bounds",
]
