"""
Grouping & Filtering Operations

Pure functions that narrow or partition a collection of assessment records.

Contracts:
  - filters never duplicate records and keep relative order
  - every grouping places each input record in exactly one group; groups
    appear in order of first appearance, records keep input order
"""
from __future__ import annotations

from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from rehab_analytics import config
from rehab_analytics.core.periods import TimeRange, start_of_week
from rehab_analytics.core.scoring import AssessmentRecord, calculate_overall_score
from rehab_analytics.core.statistics import quartile_bounds
from rehab_analytics.utils import get_logger, InvalidGroupingError
from .base import (
    ComparisonFilters,
    GroupBy,
    GroupOptions,
    PatientGroup,
    ScoreBand,
    UNGROUPED_LABEL,
)

logger = get_logger(__name__)


# ── Filtering ────────────────────────────────────────────────────────────────

def filter_by_time_range(records: Iterable[AssessmentRecord], time_range: TimeRange) -> List[AssessmentRecord]:
    return [r for r in records if time_range.contains(r.assessed_at)]


def filter_by_patients(
    records: Iterable[AssessmentRecord],
    patient_ids: Optional[Iterable[str]],
) -> List[AssessmentRecord]:
    """Keep records of the given patients. An empty or missing id list keeps all."""
    wanted = set(patient_ids or ())
    if not wanted:
        return list(records)
    return [r for r in records if r.patient_id in wanted]


def filter_by_min_assessments(records: Sequence[AssessmentRecord], minimum: int) -> List[AssessmentRecord]:
    counts = Counter(r.patient_id for r in records)
    return [r for r in records if counts[r.patient_id] >= minimum]


def filter_patients_by_min_assessments(groups: Iterable[PatientGroup], minimum: int) -> List[PatientGroup]:
    return [g for g in groups if len(g.records) >= minimum]


def exclude_score_outliers(records: Sequence[AssessmentRecord]) -> List[AssessmentRecord]:
    """Drop records whose overall score falls outside the IQR fences."""
    if len(records) < 4:
        return list(records)
    scores = [calculate_overall_score(r) for r in records]
    lower, upper = quartile_bounds(scores)
    kept = [r for r, s in zip(records, scores) if lower <= s <= upper]
    if len(kept) != len(records):
        logger.debug(f"exclude_score_outliers: dropped {len(records) - len(kept)} record(s)")
    return kept


def apply_comparison_filters(
    records: Iterable[AssessmentRecord],
    filters: ComparisonFilters,
) -> List[AssessmentRecord]:
    """Apply date range, patient, outlier and minimum-count filters in that order."""
    filtered = list(records)

    if filters.date_range is not None:
        filtered = filter_by_time_range(filtered, filters.date_range)

    if filters.patient_ids:
        filtered = filter_by_patients(filtered, filters.patient_ids)

    if filters.exclude_outliers:
        filtered = exclude_score_outliers(filtered)

    if filters.min_assessments:
        filtered = filter_by_min_assessments(filtered, filters.min_assessments)

    return filtered


# ── Grouping ─────────────────────────────────────────────────────────────────

def score_band(score: float) -> ScoreBand:
    if score >= config.EXCELLENT_BAND_MIN:
        return ScoreBand.EXCELLENT
    if score >= config.GOOD_BAND_MIN:
        return ScoreBand.GOOD
    if score >= config.FAIR_BAND_MIN:
        return ScoreBand.FAIR
    return ScoreBand.POOR


def _month_key(record: AssessmentRecord) -> str:
    return record.assessed_at.strftime("%Y-%m")


def _week_key(record: AssessmentRecord) -> str:
    return start_of_week(record.assessed_at).strftime("%Y-%m-%d")


def _score_band_key(record: AssessmentRecord) -> str:
    return score_band(calculate_overall_score(record)).value


def _partition(records: Iterable[AssessmentRecord], key: Callable[[AssessmentRecord], str]) -> Dict[str, List[AssessmentRecord]]:
    groups: Dict[str, List[AssessmentRecord]] = {}
    for record in records:
        groups.setdefault(key(record), []).append(record)
    return groups


def group_assessments(
    records: Iterable[AssessmentRecord],
    options: GroupOptions,
) -> Dict[str, List[AssessmentRecord]]:
    """
    Partition records by patient, calendar month, ISO week, score band, or a
    caller-supplied patient -> group map.

    Raises:
        InvalidGroupingError: unknown ``by`` value, or CUSTOM without a map.
    """
    try:
        by = GroupBy(options.by)
    except ValueError as exc:
        raise InvalidGroupingError(f"Unknown grouping: {options.by!r}", group_by=str(options.by)) from exc

    if by is GroupBy.PATIENT:
        key = lambda r: r.patient_id
    elif by is GroupBy.MONTH:
        key = _month_key
    elif by is GroupBy.WEEK:
        key = _week_key
    elif by is GroupBy.SCORE_RANGE:
        key = _score_band_key
    else:
        if options.custom_groups is None:
            raise InvalidGroupingError("Custom grouping requires a patient-to-group map", group_by=by.value)
        mapping = options.custom_groups
        key = lambda r: mapping.get(r.patient_id, UNGROUPED_LABEL)

    groups = _partition(records, key)
    logger.debug(f"group_assessments [{by.value}]: {len(groups)} group(s)")
    return groups


def group_by_patient(records: Iterable[AssessmentRecord]) -> List[PatientGroup]:
    """Bundle records into PatientGroups, taking the first non-empty patient name seen."""
    groups = []
    for patient_id, patient_records in _partition(records, lambda r: r.patient_id).items():
        name = next((r.patient_name for r in patient_records if r.patient_name), None)
        groups.append(PatientGroup(patient_id=patient_id, records=tuple(patient_records), patient_name=name))
    return groups
