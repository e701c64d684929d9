"""
Assessment Comparator

Two comparison modes over normalised scores:

  Time comparison
      Average each window per dimension, then report the difference, the
      guarded percentage change, and whether the absolute difference clears
      a fixed threshold (0.5 per dimension, 0.3 overall).

  Patient comparison
      Average each patient's scores, rank patients by overall average
      (descending, stable), derive percentiles, and report each patient's
      deviation from the group average. The group average is the unweighted
      mean of per-patient averages, so every patient counts once regardless
      of how many assessments they have.

Both are pure: inputs are read, fresh results are returned.

Usage:
    from rehab_analytics.core.comparison import compare_time_ranges, compare_patients

    delta = compare_time_ranges(this_month, last_month)
    ranking = compare_patients(group_by_patient(records))
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from rehab_analytics import config
from rehab_analytics.core.grouping import PatientGroup, filter_by_time_range
from rehab_analytics.core.periods import ComparisonPeriod, TimeRange, TimeRangePair, create_time_ranges
from rehab_analytics.core.scoring import (
    ALL_DIMENSIONS,
    AssessmentRecord,
    Dimension,
    average_record_scores,
    calculate_average_scores,
)
from rehab_analytics.utils import get_logger
from .base import PatientComparison, TimeComparison
from .change import percentage_change

logger = get_logger(__name__)


def _significance_threshold(dimension: Dimension) -> float:
    if dimension is Dimension.OVERALL:
        return config.OVERALL_SIGNIFICANCE_THRESHOLD
    return config.DIMENSION_SIGNIFICANCE_THRESHOLD


# ── Time comparison ──────────────────────────────────────────────────────────

def compare_time_ranges(
    current_period: Sequence[AssessmentRecord],
    previous_period: Sequence[AssessmentRecord],
) -> TimeComparison:
    """
    Compare the per-dimension averages of two record collections.

    An empty window averages to zero, so an empty previous window paired with
    a non-empty current one reports a change rate of 100.
    """
    current_avg = average_record_scores(current_period)
    previous_avg = average_record_scores(previous_period)

    difference = {d: current_avg.get(d) - previous_avg.get(d) for d in ALL_DIMENSIONS}
    change_rate = {d: percentage_change(previous_avg.get(d), current_avg.get(d)) for d in ALL_DIMENSIONS}
    significance = {d: abs(difference[d]) > _significance_threshold(d) for d in ALL_DIMENSIONS}

    logger.debug(
        f"compare_time_ranges: {len(current_period)} current vs {len(previous_period)} previous, "
        f"overall diff {difference[Dimension.OVERALL]:+.3f}"
    )
    return TimeComparison(
        current_average=current_avg,
        previous_average=previous_avg,
        difference=difference,
        change_rate=change_rate,
        significance=significance,
        current_count=len(current_period),
        previous_count=len(previous_period),
    )


def compare_periods(
    records: Iterable[AssessmentRecord],
    period: Union[ComparisonPeriod, str],
    reference_date: Optional[datetime] = None,
    current: Optional[TimeRange] = None,
    previous: Optional[TimeRange] = None,
) -> Tuple[TimeComparison, TimeRangePair]:
    """Build the period's windows, bucket ``records`` into them, and compare."""
    ranges = create_time_ranges(period, reference_date, current=current, previous=previous)
    records = list(records)
    comparison = compare_time_ranges(
        filter_by_time_range(records, ranges.current),
        filter_by_time_range(records, ranges.previous),
    )
    return comparison, ranges


# ── Patient comparison ───────────────────────────────────────────────────────

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compare_patients(groups: Sequence[PatientGroup]) -> List[PatientComparison]:
    """
    Rank patients by their average overall score.

    Patients with equal overall averages keep their input order; no further
    tie-break is applied. Rank 1 gets percentile 100, rank N gets
    round(100 / N).
    """
    n = len(groups)
    if n == 0:
        return []

    averages = [average_record_scores(g.records) for g in groups]
    group_average = calculate_average_scores(averages)

    order = sorted(range(n), key=lambda i: averages[i].overall, reverse=True)

    results = []
    for position, index in enumerate(order):
        group, avg = groups[index], averages[index]
        rank = position + 1
        results.append(PatientComparison(
            patient_id=group.patient_id,
            patient_name=group.patient_name,
            assessment_count=len(group.records),
            average_scores=avg,
            rank=rank,
            percentile=_round_half_up((n - rank + 1) / n * 100),
            deviation_from_group={d: avg.get(d) - group_average.get(d) for d in ALL_DIMENSIONS},
        ))

    logger.debug(
        f"compare_patients: ranked {n} patient(s), group overall {group_average.overall:.3f}"
    )
    return results


@dataclass(frozen=True)
class SortOptions:
    """Sort key for patient comparisons: a Dimension value or ``rank``."""
    field: str = Dimension.OVERALL.value
    descending: bool = True


def sort_patient_comparisons(
    comparisons: Iterable[PatientComparison],
    options: SortOptions,
) -> List[PatientComparison]:
    """Stable re-sort of patient comparisons for display."""
    if options.field == "rank":
        key = lambda p: p.rank
    else:
        dimension = Dimension(options.field)
        key = lambda p: p.average_scores.get(dimension)
    return sorted(comparisons, key=key, reverse=options.descending)
