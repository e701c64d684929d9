"""
Change-rate helpers shared by the comparator and export.
"""
from rehab_analytics import config
from .base import ImprovementClass


def percentage_change(previous: float, current: float) -> float:
    """
    (current - previous) / previous * 100, guarded.

    A zero baseline returns 100 when current is positive and 0 otherwise,
    so the result is always finite.
    """
    if previous == 0:
        return config.ZERO_BASELINE_GROWTH_RATE if current > 0 else 0.0
    return (current - previous) / previous * 100


def calculate_change_rate(old_value: float, new_value: float) -> float:
    """percentage_change rounded to one decimal place."""
    return round(percentage_change(old_value, new_value), 1)


# (lower bound, class), checked top-down
_IMPROVEMENT_BANDS = (
    (20.0, ImprovementClass.SIGNIFICANT_IMPROVEMENT),
    (10.0, ImprovementClass.MODERATE_IMPROVEMENT),
    (5.0, ImprovementClass.SLIGHT_IMPROVEMENT),
    (-5.0, ImprovementClass.STABLE),
    (-10.0, ImprovementClass.SLIGHT_DECLINE),
    (-20.0, ImprovementClass.MODERATE_DECLINE),
)


def classify_improvement(change_rate: float) -> ImprovementClass:
    for lower, label in _IMPROVEMENT_BANDS:
        if change_rate >= lower:
            return label
    return ImprovementClass.SIGNIFICANT_DECLINE
