"""
Progress Analyzer

Fits an ordinary least-squares line per dimension through one patient's
time-ordered scores and classifies the trajectory.

  x  = assessment index (0, 1, 2, ...) after sorting by timestamp
  y  = the dimension's normalised score
  slope = (n Σxy - Σx Σy) / (n Σx² - (Σx)²)

  slope >  threshold  → improving
  slope < -threshold  → declining
  otherwise           → stable

The threshold (0.05 score points per assessment) is a tunable constant.

Reliability rewards both sample size and observation span:
  min(1, (count / 5) × (days / 30))
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from rehab_analytics import config
from rehab_analytics.core.comparison.base import ProgressAnalysis, TrendDirection
from rehab_analytics.core.grouping import PatientGroup
from rehab_analytics.core.scoring import (
    ALL_DIMENSIONS,
    AssessmentRecord,
    Dimension,
    dimension_series,
    get_scores_by_dimension,
)
from rehab_analytics.utils import get_logger, InsufficientDataError

logger = get_logger(__name__)


def linear_regression_slope(values: Sequence[float]) -> float:
    """Least-squares slope of ``values`` against their index."""
    y = np.asarray(values, dtype=float)
    n = y.size
    x = np.arange(n, dtype=float)

    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_xx = (x * y).sum(), (x * x).sum()

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        # Single point: no line to fit
        return 0.0
    return float((n * sum_xy - sum_x * sum_y) / denominator)


def coefficient_of_determination(values: Sequence[float], slope: float) -> float:
    """R² of the index-based fit. A constant series reports 0."""
    y = np.asarray(values, dtype=float)
    x = np.arange(y.size, dtype=float)
    intercept = y.mean() - slope * x.mean()

    ss_tot = float(((y - y.mean()) ** 2).sum())
    if ss_tot == 0:
        return 0.0
    ss_res = float(((y - (intercept + slope * x)) ** 2).sum())
    return max(0.0, 1.0 - ss_res / ss_tot)


def classify_trend(slope: float, threshold: float = config.TREND_THRESHOLD) -> TrendDirection:
    if slope > threshold:
        return TrendDirection.IMPROVING
    if slope < -threshold:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


def calculate_reliability(assessment_count: int, day_span: float) -> float:
    raw = (assessment_count / config.RELIABILITY_ASSESSMENT_SCALE) * (day_span / config.RELIABILITY_DAY_SCALE)
    return min(1.0, raw)


def analyze_progress(
    records: Sequence[AssessmentRecord],
    patient_id: str,
    trend_threshold: float = config.TREND_THRESHOLD,
) -> ProgressAnalysis:
    """
    Analyse one patient's progress across their assessments.

    Args:
        records: That patient's assessments, in any order.
        patient_id: Identifier copied onto the result.
        trend_threshold: Minimum absolute slope counted as a trend.

    Raises:
        InsufficientDataError: fewer than 2 records, since a slope is
            undefined for a single point.
    """
    if len(records) < config.MIN_PROGRESS_ASSESSMENTS:
        raise InsufficientDataError(
            f"Progress analysis for patient {patient_id} needs at least "
            f"{config.MIN_PROGRESS_ASSESSMENTS} assessments, got {len(records)}",
            required=config.MIN_PROGRESS_ASSESSMENTS,
            actual=len(records),
            details={"patient_id": patient_id},
        )

    ordered = sorted(records, key=lambda r: r.assessed_at)
    scores = get_scores_by_dimension(ordered)

    slopes: Dict[Dimension, float] = {}
    r_squared: Dict[Dimension, float] = {}
    for dimension in ALL_DIMENSIONS:
        series = dimension_series(scores, dimension)
        slopes[dimension] = linear_regression_slope(series)
        r_squared[dimension] = coefficient_of_determination(series, slopes[dimension])

    trends = {d: classify_trend(s, trend_threshold) for d, s in slopes.items()}

    start, end = ordered[0].assessed_at, ordered[-1].assessed_at
    day_span = (end - start).total_seconds() / 86400.0
    reliability = calculate_reliability(len(ordered), day_span)

    logger.debug(
        f"analyze_progress [{patient_id}]: n={len(ordered)}, "
        f"overall slope {slopes[Dimension.OVERALL]:+.4f} ({trends[Dimension.OVERALL].value}), "
        f"reliability {reliability:.2f}"
    )
    return ProgressAnalysis(
        patient_id=patient_id,
        start=start,
        end=end,
        assessment_count=len(ordered),
        slopes=slopes,
        trends=trends,
        r_squared=r_squared,
        reliability=reliability,
    )


def analyze_progress_many(
    groups: Sequence[PatientGroup],
    trend_threshold: float = config.TREND_THRESHOLD,
    max_workers: Optional[int] = None,
) -> Tuple[List[ProgressAnalysis], List[str]]:
    """
    Run ``analyze_progress`` for every patient group.

    Patients with too few assessments are skipped rather than failing the
    whole batch. Results keep the input order.

    Args:
        groups: One PatientGroup per patient.
        trend_threshold: Passed through to ``analyze_progress``.
        max_workers: When > 1, patients are analysed on a thread pool.

    Returns:
        (analyses, skipped_patient_ids)
    """
    eligible = [g for g in groups if len(g.records) >= config.MIN_PROGRESS_ASSESSMENTS]
    skipped = [g.patient_id for g in groups if len(g.records) < config.MIN_PROGRESS_ASSESSMENTS]

    for patient_id in skipped:
        logger.warning(f"analyze_progress_many: skipping {patient_id}, fewer than "
                       f"{config.MIN_PROGRESS_ASSESSMENTS} assessments")

    def _run(group: PatientGroup) -> ProgressAnalysis:
        return analyze_progress(group.records, group.patient_id, trend_threshold)

    if max_workers and max_workers > 1 and len(eligible) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            analyses = list(executor.map(_run, eligible))
    else:
        analyses = [_run(g) for g in eligible]

    logger.debug(f"analyze_progress_many: {len(analyses)} analysed, {len(skipped)} skipped")
    return analyses, skipped
