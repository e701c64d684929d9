"""
Score Normalizer

Turns one AssessmentRecord into a DimensionScore: five 1-5 dimension scores
and their unweighted mean. Pure functions, no caching, no hidden state.

Rules:
  - concentration : duration_minutes / 60, clamped to [1, 5]
  - motivation    : mean of the four ratings; a blank rating counts as 0
                    and stays in the denominator
  - success       : 0.5 per achievement area + 2 (most significant)
                    + 1 (learning) + 1 (transferable strategies), clamped
  - constraints   : 6 - severity_rating (severity defaults to 3)
  - social        : mean of the two social ratings, blanks count as 0
"""
from __future__ import annotations

from functools import reduce
from typing import Iterable, List, Optional, Sequence

from rehab_analytics import config
from rehab_analytics.utils import get_logger
from .base import AssessmentRecord, Dimension, DimensionScore, ALL_DIMENSIONS

logger = get_logger(__name__)


def _clamp(value: float, lo: float = config.SCORE_MIN, hi: float = config.SCORE_MAX) -> float:
    return min(hi, max(lo, value))


def _rating(value: Optional[int]) -> float:
    return float(value) if value else 0.0


def concentration_score(record: AssessmentRecord) -> float:
    minutes = record.concentration_time.duration or 0.0
    return _clamp(minutes / config.MINUTES_PER_CONCENTRATION_POINT)


def motivation_score(record: AssessmentRecord) -> float:
    ratings = record.motivation_level.ratings()
    return sum(_rating(r) for r in ratings) / len(ratings)


def success_score(record: AssessmentRecord) -> float:
    past = record.past_successes
    raw = (
        len(past.achievement_areas) * config.ACHIEVEMENT_AREA_WEIGHT
        + (config.SIGNIFICANT_ACHIEVEMENT_WEIGHT if past.most_significant_achievement else 0.0)
        + (config.LEARNING_WEIGHT if past.learning_from_success else 0.0)
        + (config.TRANSFERABLE_STRATEGY_WEIGHT if past.transferable_strategies else 0.0)
    )
    return _clamp(raw)


def constraints_score(record: AssessmentRecord) -> float:
    """Inverted severity: higher means fewer constraints."""
    severity = record.constraints.severity_rating or config.DEFAULT_SEVERITY_RATING
    return float(config.CONSTRAINTS_INVERSION_BASE - severity)


def social_score(record: AssessmentRecord) -> float:
    social = record.social_preference
    return (_rating(social.comfort_with_strangers) + _rating(social.collaboration_willingness)) / 2


def calculate_assessment_score(record: AssessmentRecord) -> DimensionScore:
    """Normalise one record into a DimensionScore."""
    concentration = concentration_score(record)
    motivation = motivation_score(record)
    success = success_score(record)
    constraints = constraints_score(record)
    social = social_score(record)

    return DimensionScore(
        concentration=concentration,
        motivation=motivation,
        success=success,
        constraints=constraints,
        social=social,
        overall=(concentration + motivation + success + constraints + social) / 5,
    )


def calculate_overall_score(record: AssessmentRecord) -> float:
    return calculate_assessment_score(record).overall


def get_scores_by_dimension(records: Iterable[AssessmentRecord]) -> List[DimensionScore]:
    """Score every record, preserving input order."""
    return [calculate_assessment_score(r) for r in records]


def _add(acc: DimensionScore, score: DimensionScore) -> DimensionScore:
    return DimensionScore.from_mapping({d: acc.get(d) + score.get(d) for d in ALL_DIMENSIONS})


def sum_scores(scores: Iterable[DimensionScore]) -> DimensionScore:
    return reduce(_add, scores, DimensionScore())


def calculate_average_scores(scores: Sequence[DimensionScore]) -> DimensionScore:
    """
    Per-dimension mean of a score collection.

    An empty collection averages to all zeros; the time comparison relies on
    that to treat an empty window as a zero baseline.
    """
    if not scores:
        logger.debug("calculate_average_scores: empty collection, returning zeros")
        return DimensionScore()

    totals = sum_scores(scores)
    n = len(scores)
    return DimensionScore.from_mapping({d: totals.get(d) / n for d in ALL_DIMENSIONS})


def average_record_scores(records: Sequence[AssessmentRecord]) -> DimensionScore:
    return calculate_average_scores(get_scores_by_dimension(records))


def dimension_series(scores: Sequence[DimensionScore], dimension: Dimension) -> List[float]:
    """One dimension's values across a score sequence."""
    return [s.get(dimension) for s in scores]
