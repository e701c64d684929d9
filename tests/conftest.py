"""
Pytest Configuration and Fixtures

Shared fixtures for the comparison engine tests.
"""
import pytest
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional, Sequence
import sys

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rehab_analytics.core.scoring import (
    AssessmentRecord,
    ConcentrationTime,
    Constraints,
    MotivationLevel,
    PastSuccesses,
    SocialPreference,
)


def build_record(
    patient_id: str = "P-001",
    assessed_at: Optional[datetime] = None,
    duration: float = 180,
    motivation: Sequence[Optional[int]] = (3, 3, 3, 3),
    achievement_areas: Sequence[str] = (),
    significant: Optional[str] = None,
    learning: Optional[str] = None,
    transferable: Optional[str] = None,
    severity: Optional[int] = 3,
    social: Sequence[Optional[int]] = (3, 3),
    record_id: Optional[str] = None,
    patient_name: Optional[str] = None,
) -> AssessmentRecord:
    """Assessment record with every dimension controllable from the call site."""
    assessed_at = assessed_at or datetime(2024, 3, 15, 10, 0)
    return AssessmentRecord(
        id=record_id or f"{patient_id}-{assessed_at.isoformat()}",
        patient_id=patient_id,
        patient_name=patient_name,
        assessed_at=assessed_at,
        concentration_time=ConcentrationTime(duration=duration),
        motivation_level=MotivationLevel(*motivation),
        past_successes=PastSuccesses(
            achievement_areas=tuple(achievement_areas),
            most_significant_achievement=significant,
            learning_from_success=learning,
            transferable_strategies=transferable,
        ),
        constraints=Constraints(severity_rating=severity),
        social_preference=SocialPreference(*social),
    )


def uniform_record(level: int, patient_id: str = "P-001", assessed_at: Optional[datetime] = None) -> AssessmentRecord:
    """Record whose five dimension scores all equal ``level`` (1-5)."""
    return build_record(
        patient_id=patient_id,
        assessed_at=assessed_at,
        duration=60 * level,
        motivation=(level,) * 4,
        achievement_areas=("area",) * (2 * level),
        severity=6 - level,
        social=(level, level),
    )


@pytest.fixture
def make_record() -> Callable[..., AssessmentRecord]:
    return build_record


@pytest.fixture
def make_uniform_record() -> Callable[..., AssessmentRecord]:
    return uniform_record


@pytest.fixture
def scenario_a_record() -> AssessmentRecord:
    """Concentration 5, motivation 5, success 4, constraints 4, social 4."""
    return build_record(
        duration=300,
        motivation=(5, 5, 5, 5),
        achievement_areas=("academic", "work"),
        significant="Finished a vocational course",
        learning="Breaking work into steps helps",
        transferable=None,
        severity=2,
        social=(4, 4),
    )


@pytest.fixture
def weekly_series() -> Callable[[Sequence[int], str], List[AssessmentRecord]]:
    """Uniform records one week apart, one per level, starting 2024-01-01."""
    def _series(levels: Sequence[int], patient_id: str = "P-001") -> List[AssessmentRecord]:
        start = datetime(2024, 1, 1, 9, 0)
        return [
            uniform_record(level, patient_id=patient_id, assessed_at=start + timedelta(weeks=i))
            for i, level in enumerate(levels)
        ]
    return _series
