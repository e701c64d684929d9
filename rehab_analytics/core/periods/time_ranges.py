"""
Time Range Builder

Builds the "current" and "previous" calendar windows used for
period-over-period comparison. Windows are whole calendar periods (ISO week,
month, quarter, year), never trailing N-day windows. Both bounds are
inclusive; ``end`` is the last microsecond of the period.
Timestamps are compared as naive UTC; aware values are converted on the way in.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from rehab_analytics.utils import get_logger, InvalidPeriodError

logger = get_logger(__name__)


class ComparisonPeriod(str, Enum):
    WEEK    = "week"
    MONTH   = "month"
    QUARTER = "quarter"
    YEAR    = "year"
    CUSTOM  = "custom"


def to_utc_naive(moment: datetime) -> datetime:
    """Express ``moment`` as naive UTC. Naive input is taken to be UTC already."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class TimeRange:
    """A bounded calendar window with a human-readable label."""
    start: datetime
    end: datetime
    label: str

    def __post_init__(self):
        object.__setattr__(self, "start", to_utc_naive(self.start))
        object.__setattr__(self, "end", to_utc_naive(self.end))

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def to_dict(self) -> Dict[str, str]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "label": self.label,
        }


@dataclass(frozen=True)
class TimeRangePair:
    current: TimeRange
    previous: TimeRange

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {"current": self.current.to_dict(), "previous": self.previous.to_dict()}


_LABELS = {
    ComparisonPeriod.WEEK:    ("This week", "Last week"),
    ComparisonPeriod.MONTH:   ("This month", "Last month"),
    ComparisonPeriod.QUARTER: ("This quarter", "Last quarter"),
    ComparisonPeriod.YEAR:    ("This year", "Last year"),
}

_ONE_TICK = timedelta(microseconds=1)


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(moment: datetime) -> datetime:
    """Monday 00:00 of the ISO week containing ``moment``."""
    return _start_of_day(moment) - timedelta(days=moment.weekday())


def _shift_months(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _month_window(moment: datetime, first_month: int, length: int) -> Tuple[datetime, datetime]:
    """[first day of first_month, first day of first_month + length) in moment's year."""
    start = _start_of_day(moment).replace(month=first_month, day=1)
    end_year, end_month = _shift_months(start.year, first_month, length)
    end = start.replace(year=end_year, month=end_month)
    return start, end - _ONE_TICK


def _period_bounds(period: ComparisonPeriod, reference: datetime) -> Tuple[Tuple[datetime, datetime], Tuple[datetime, datetime]]:
    if period is ComparisonPeriod.WEEK:
        current_start = start_of_week(reference)
        previous_start = current_start - timedelta(days=7)
        return (
            (current_start, current_start + timedelta(days=7) - _ONE_TICK),
            (previous_start, current_start - _ONE_TICK),
        )

    if period is ComparisonPeriod.MONTH:
        length = 1
        first_month = reference.month
    elif period is ComparisonPeriod.QUARTER:
        length = 3
        first_month = (reference.month - 1) // 3 * 3 + 1
    else:  # YEAR
        length = 12
        first_month = 1

    current = _month_window(reference, first_month, length)
    prev_year, prev_month = _shift_months(reference.year, first_month, -length)
    previous = _month_window(reference.replace(year=prev_year, month=prev_month, day=1), prev_month, length)
    return current, previous


def create_time_ranges(
    period: Union[ComparisonPeriod, str],
    reference_date: Optional[datetime] = None,
    current: Optional[TimeRange] = None,
    previous: Optional[TimeRange] = None,
) -> TimeRangePair:
    """
    Build comparable current/previous windows for a comparison period.

    Args:
        period: week, month, quarter, year or custom.
        reference_date: Instant whose period is "current" (default: now).
            Aware values are converted to UTC; boundaries are naive UTC.
        current, previous: Explicit ranges; required for ``custom`` and
            ignored for every other period.

    Raises:
        InvalidPeriodError: unknown period, or ``custom`` without both ranges.
    """
    try:
        period = ComparisonPeriod(period)
    except ValueError as exc:
        raise InvalidPeriodError(f"Unknown comparison period: {period!r}", period=str(period)) from exc

    if period is ComparisonPeriod.CUSTOM:
        if current is None or previous is None:
            raise InvalidPeriodError(
                "Custom period requires explicit current and previous time ranges",
                period=period.value,
            )
        return TimeRangePair(current=current, previous=previous)

    reference = to_utc_naive(reference_date or datetime.now(timezone.utc))
    (cur_start, cur_end), (prev_start, prev_end) = _period_bounds(period, reference)
    current_label, previous_label = _LABELS[period]

    logger.debug(
        f"create_time_ranges [{period.value}]: current {cur_start.date()}..{cur_end.date()}, "
        f"previous {prev_start.date()}..{prev_end.date()}"
    )
    return TimeRangePair(
        current=TimeRange(start=cur_start, end=cur_end, label=current_label),
        previous=TimeRange(start=prev_start, end=prev_end, label=previous_label),
    )
