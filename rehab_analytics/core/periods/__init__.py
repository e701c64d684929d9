"""
Comparison Periods

Calendar windows for period-over-period comparison.
"""
from .time_ranges import (
    ComparisonPeriod,
    TimeRange,
    TimeRangePair,
    create_time_ranges,
    start_of_week,
    to_utc_naive,
)

__all__ = [
    "ComparisonPeriod",
    "TimeRange",
    "TimeRangePair",
    "create_time_ranges",
    "start_of_week",
    "to_utc_naive",
]
