"""
Assessment Scoring

Typed assessment records and their normalised per-dimension scores.

Usage:
    from rehab_analytics.core.scoring import AssessmentRecord, calculate_assessment_score

    record = AssessmentRecord.from_dict(row)
    score = calculate_assessment_score(record)
    print(score.overall)
"""
from .base import (
    AssessmentRecord,
    AssessmentStatus,
    ConcentrationTime,
    Constraints,
    Dimension,
    DimensionScore,
    MotivationLevel,
    PastSuccesses,
    SocialPreference,
    ALL_DIMENSIONS,
)
from .normalizer import (
    calculate_assessment_score,
    calculate_overall_score,
    calculate_average_scores,
    average_record_scores,
    get_scores_by_dimension,
    dimension_series,
)

__all__ = [
    "AssessmentRecord",
    "AssessmentStatus",
    "ConcentrationTime",
    "Constraints",
    "Dimension",
    "DimensionScore",
    "MotivationLevel",
    "PastSuccesses",
    "SocialPreference",
    "ALL_DIMENSIONS",
    "calculate_assessment_score",
    "calculate_overall_score",
    "calculate_average_scores",
    "average_record_scores",
    "get_scores_by_dimension",
    "dimension_series",
]
