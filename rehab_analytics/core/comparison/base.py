"""
Comparison - Result Types

The three result shapes the engine produces, and the tagged wrapper that
carries exactly one of them to presentation/export. All results are
transient: built for one orchestration cycle and never persisted.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rehab_analytics.core.scoring import ALL_DIMENSIONS, Dimension, DimensionScore


class ComparisonMode(str, Enum):
    TIME     = "time"
    PATIENT  = "patient"
    PROGRESS = "progress"


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE    = "stable"


class ImprovementClass(str, Enum):
    """Seven-step classification of a percentage change."""
    SIGNIFICANT_IMPROVEMENT = "significant_improvement"
    MODERATE_IMPROVEMENT    = "moderate_improvement"
    SLIGHT_IMPROVEMENT      = "slight_improvement"
    STABLE                  = "stable"
    SLIGHT_DECLINE          = "slight_decline"
    MODERATE_DECLINE        = "moderate_decline"
    SIGNIFICANT_DECLINE     = "significant_decline"


def _select(dimensions: Optional[Iterable[Dimension]]) -> Tuple[Dimension, ...]:
    if dimensions is None:
        return ALL_DIMENSIONS
    chosen = {Dimension(d) for d in dimensions}
    # OVERALL always stays in the output
    chosen.add(Dimension.OVERALL)
    return tuple(d for d in ALL_DIMENSIONS if d in chosen)


def _per_dimension(values: Dict[Dimension, Any], dimensions: Tuple[Dimension, ...], ndigits: Optional[int] = 3) -> Dict[str, Any]:
    out = {}
    for d in dimensions:
        v = values[d]
        if isinstance(v, Enum):
            v = v.value
        elif ndigits is not None and isinstance(v, float):
            v = round(v, ndigits)
        out[d.value] = v
    return out


@dataclass
class TimeComparison:
    """Period-over-period change of the per-dimension averages."""
    current_average: DimensionScore
    previous_average: DimensionScore
    difference: Dict[Dimension, float]
    change_rate: Dict[Dimension, float]      # percent, always finite
    significance: Dict[Dimension, bool]
    current_count: int = 0
    previous_count: int = 0

    def to_dict(self, dimensions: Optional[Iterable[Dimension]] = None) -> Dict[str, Any]:
        dims = _select(dimensions)
        return {
            "current_average": self.current_average.to_dict(dims),
            "previous_average": self.previous_average.to_dict(dims),
            "difference": _per_dimension(self.difference, dims),
            "change_rate": _per_dimension(self.change_rate, dims, ndigits=1),
            "significance": _per_dimension(self.significance, dims, ndigits=None),
            "current_count": self.current_count,
            "previous_count": self.previous_count,
        }


@dataclass
class PatientComparison:
    """One patient's standing within the compared group."""
    patient_id: str
    patient_name: Optional[str]
    assessment_count: int
    average_scores: DimensionScore
    rank: int
    percentile: int
    deviation_from_group: Dict[Dimension, float]

    def to_dict(self, dimensions: Optional[Iterable[Dimension]] = None) -> Dict[str, Any]:
        dims = _select(dimensions)
        return {
            "patient_id": self.patient_id,
            "patient_name": self.patient_name,
            "assessment_count": self.assessment_count,
            "average_scores": self.average_scores.to_dict(dims),
            "rank": self.rank,
            "percentile": self.percentile,
            "deviation_from_group": _per_dimension(self.deviation_from_group, dims),
        }


@dataclass
class ProgressAnalysis:
    """Per-dimension least-squares trend for one patient's assessments."""
    patient_id: str
    start: datetime
    end: datetime
    assessment_count: int
    slopes: Dict[Dimension, float]
    trends: Dict[Dimension, TrendDirection]
    r_squared: Dict[Dimension, float]
    reliability: float

    @property
    def day_span(self) -> float:
        return (self.end - self.start).total_seconds() / 86400.0

    def to_dict(self, dimensions: Optional[Iterable[Dimension]] = None) -> Dict[str, Any]:
        dims = _select(dimensions)
        return {
            "patient_id": self.patient_id,
            "time_range": {"start": self.start.isoformat(), "end": self.end.isoformat()},
            "assessment_count": self.assessment_count,
            "slopes": _per_dimension(self.slopes, dims, ndigits=4),
            "trends": _per_dimension(self.trends, dims, ndigits=None),
            "r_squared": _per_dimension(self.r_squared, dims),
            "reliability": round(self.reliability, 3),
        }


@dataclass
class ComparisonResult:
    """
    Tagged result: ``mode`` says which one of the payload fields is set.

    Build through the ``of_*`` constructors so mode and payload agree.
    """
    mode: ComparisonMode
    time_comparison: Optional[TimeComparison] = None
    patient_comparisons: List[PatientComparison] = field(default_factory=list)
    progress_analyses: List[ProgressAnalysis] = field(default_factory=list)

    @classmethod
    def of_time(cls, comparison: TimeComparison) -> "ComparisonResult":
        return cls(mode=ComparisonMode.TIME, time_comparison=comparison)

    @classmethod
    def of_patients(cls, comparisons: Iterable[PatientComparison]) -> "ComparisonResult":
        return cls(mode=ComparisonMode.PATIENT, patient_comparisons=list(comparisons))

    @classmethod
    def of_progress(cls, analyses: Iterable[ProgressAnalysis]) -> "ComparisonResult":
        return cls(mode=ComparisonMode.PROGRESS, progress_analyses=list(analyses))

    @property
    def data_points(self) -> int:
        if self.mode is ComparisonMode.TIME:
            return 1 if self.time_comparison is not None else 0
        if self.mode is ComparisonMode.PATIENT:
            return len(self.patient_comparisons)
        return len(self.progress_analyses)

    @property
    def is_empty(self) -> bool:
        return self.data_points == 0

    def to_dict(self, dimensions: Optional[Iterable[Dimension]] = None) -> Dict[str, Any]:
        if dimensions is not None:
            dimensions = list(dimensions)
        out: Dict[str, Any] = {"mode": self.mode.value}
        if self.mode is ComparisonMode.TIME:
            out["time_comparison"] = (
                self.time_comparison.to_dict(dimensions) if self.time_comparison is not None else None
            )
        elif self.mode is ComparisonMode.PATIENT:
            out["patient_comparisons"] = [p.to_dict(dimensions) for p in self.patient_comparisons]
        else:
            out["progress_analyses"] = [a.to_dict(dimensions) for a in self.progress_analyses]
        return out
