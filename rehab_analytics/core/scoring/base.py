"""
Assessment Scoring - Base Types

Typed views over the assessment records handed in by the data layer, and
the normalised per-dimension score derived from each one. Records are
frozen: the engine reads them and never writes back.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from rehab_analytics.core.periods.time_ranges import to_utc_naive
from rehab_analytics.utils.exceptions import RecordParseError


class Dimension(str, Enum):
    """The five assessed dimensions plus their unweighted mean."""
    CONCENTRATION = "concentration"
    MOTIVATION    = "motivation"
    SUCCESS       = "success"
    CONSTRAINTS   = "constraints"
    SOCIAL        = "social"
    OVERALL       = "overall"

    @classmethod
    def named(cls) -> Tuple["Dimension", ...]:
        """The five assessed dimensions, without OVERALL."""
        return (cls.CONCENTRATION, cls.MOTIVATION, cls.SUCCESS, cls.CONSTRAINTS, cls.SOCIAL)


ALL_DIMENSIONS: Tuple[Dimension, ...] = tuple(Dimension)


class AssessmentStatus(str, Enum):
    DRAFT     = "draft"
    COMPLETED = "completed"
    REVIEWED  = "reviewed"


# ── Sub-records ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ConcentrationTime:
    """How long the patient can stay focused on one task."""
    duration: float = 0.0                 # minutes
    environment: Optional[str] = None     # quiet | moderate | noisy
    time_of_day: Optional[str] = None     # morning | afternoon | evening
    notes: Optional[str] = None


@dataclass(frozen=True)
class MotivationLevel:
    """Four 1-5 ratings. None means the assessor left the rating blank."""
    goal_clarity: Optional[int] = None
    effort_willingness: Optional[int] = None
    confidence_level: Optional[int] = None
    external_support: Optional[int] = None
    notes: Optional[str] = None

    def ratings(self) -> Tuple[Optional[int], ...]:
        return (
            self.goal_clarity,
            self.effort_willingness,
            self.confidence_level,
            self.external_support,
        )


@dataclass(frozen=True)
class PastSuccesses:
    """Achievement-area tags plus optional narrative answers."""
    achievement_areas: Tuple[str, ...] = ()
    most_significant_achievement: Optional[str] = None
    learning_from_success: Optional[str] = None
    transferable_strategies: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self):
        # Accept any iterable from callers but store an immutable tuple
        object.__setattr__(self, "achievement_areas", tuple(self.achievement_areas or ()))


@dataclass(frozen=True)
class Constraints:
    """Overall severity of the patient's barriers, 1 (mild) - 5 (severe)."""
    severity_rating: Optional[int] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class SocialPreference:
    comfort_with_strangers: Optional[int] = None
    collaboration_willingness: Optional[int] = None
    group_size_preference: Optional[str] = None
    notes: Optional[str] = None


# ── Record ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AssessmentRecord:
    """
    One completed evaluation of a patient at a point in time.

    Owned by the external data layer; the engine only reads it.
    """
    id: str
    patient_id: str
    assessed_at: datetime
    concentration_time: ConcentrationTime = field(default_factory=ConcentrationTime)
    motivation_level: MotivationLevel = field(default_factory=MotivationLevel)
    past_successes: PastSuccesses = field(default_factory=PastSuccesses)
    constraints: Constraints = field(default_factory=Constraints)
    social_preference: SocialPreference = field(default_factory=SocialPreference)
    patient_name: Optional[str] = None
    assessor_id: Optional[str] = None
    status: AssessmentStatus = AssessmentStatus.COMPLETED

    def __post_init__(self):
        object.__setattr__(self, "assessed_at", to_utc_naive(self.assessed_at))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssessmentRecord":
        """
        Build a record from the loosely-shaped dict returned by the data layer.

        Missing sub-records and fields are defaulted rather than rejected.
        The timestamp is read from ``assessed_at``, falling back to
        ``created_at`` and then ``assessment_date``. Aware timestamps are
        stored as naive UTC.

        Raises:
            RecordParseError: the payload is not a mapping, has no patient id,
                carries no parseable timestamp, or has a non-numeric duration.
        """
        if not isinstance(data, Mapping):
            raise RecordParseError(
                f"Assessment payload must be a mapping, got {type(data).__name__}",
                field="<root>",
            )

        patient_id = data.get("patient_id")
        if not patient_id:
            raise RecordParseError("Assessment payload has no patient_id", field="patient_id")

        raw_ts = data.get("assessed_at") or data.get("created_at") or data.get("assessment_date")
        assessed_at = _parse_timestamp(raw_ts)

        try:
            status = AssessmentStatus(data.get("status") or AssessmentStatus.COMPLETED.value)
        except ValueError as exc:
            raise RecordParseError(
                f"Unknown assessment status: {data.get('status')!r}",
                field="status",
            ) from exc

        conc = data.get("concentration_time") or {}
        mot = data.get("motivation_level") or {}
        past = data.get("past_successes") or {}
        cons = data.get("constraints") or {}
        soc = data.get("social_preference") or {}

        return cls(
            id=str(data.get("id") or f"{patient_id}@{assessed_at.isoformat()}"),
            patient_id=str(patient_id),
            assessed_at=assessed_at,
            concentration_time=ConcentrationTime(
                duration=_parse_duration(conc.get("duration")),
                environment=conc.get("environment"),
                time_of_day=conc.get("time_of_day"),
                notes=conc.get("notes"),
            ),
            motivation_level=MotivationLevel(
                goal_clarity=mot.get("goal_clarity"),
                effort_willingness=mot.get("effort_willingness"),
                confidence_level=mot.get("confidence_level"),
                external_support=mot.get("external_support"),
                notes=mot.get("notes"),
            ),
            past_successes=PastSuccesses(
                achievement_areas=tuple(past.get("achievement_areas") or ()),
                most_significant_achievement=past.get("most_significant_achievement"),
                learning_from_success=past.get("learning_from_success"),
                transferable_strategies=past.get("transferable_strategies"),
                notes=past.get("notes"),
            ),
            constraints=Constraints(
                severity_rating=cons.get("severity_rating"),
                notes=cons.get("notes"),
            ),
            social_preference=SocialPreference(
                comfort_with_strangers=soc.get("comfort_with_strangers"),
                collaboration_willingness=soc.get("collaboration_willingness"),
                group_size_preference=soc.get("group_size_preference"),
                notes=soc.get("notes"),
            ),
            patient_name=data.get("patient_name"),
            assessor_id=data.get("assessor_id"),
            status=status,
        )


def _parse_duration(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError) as exc:
        raise RecordParseError(
            f"Unparseable concentration duration: {value!r}",
            field="concentration_time.duration",
        ) from exc


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        raise RecordParseError("Assessment payload has no timestamp", field="assessed_at")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise RecordParseError(
            f"Unparseable assessment timestamp: {value!r}",
            field="assessed_at",
        ) from exc


# ── Derived score ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DimensionScore:
    """
    Normalised 1-5 score per dimension plus their unweighted mean.

    Derived fresh from one record (or folded from several); never persisted.
    """
    concentration: float = 0.0
    motivation: float = 0.0
    success: float = 0.0
    constraints: float = 0.0
    social: float = 0.0
    overall: float = 0.0

    def get(self, dimension: Dimension) -> float:
        return getattr(self, Dimension(dimension).value)

    def named_values(self) -> Tuple[float, ...]:
        return tuple(self.get(d) for d in Dimension.named())

    @classmethod
    def from_mapping(cls, values: Mapping[Dimension, float]) -> "DimensionScore":
        return cls(**{Dimension(k).value: float(v) for k, v in values.items()})

    def to_dict(self, dimensions: Optional[Iterable[Dimension]] = None) -> Dict[str, float]:
        keys = ALL_DIMENSIONS if dimensions is None else dimensions
        return {Dimension(d).value: round(self.get(d), 3) for d in keys}
