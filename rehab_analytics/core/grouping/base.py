"""
Grouping & Filtering - Base Types
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from rehab_analytics.core.periods import TimeRange
from rehab_analytics.core.scoring import AssessmentRecord


class GroupBy(str, Enum):
    PATIENT     = "patient"
    MONTH       = "month"
    WEEK        = "week"
    SCORE_RANGE = "score_range"
    CUSTOM      = "custom"


class ScoreBand(str, Enum):
    """Overall-score band. Lower bounds are inclusive."""
    EXCELLENT = "excellent"   # >= 4.0
    GOOD      = "good"        # 3.0 - 3.9
    FAIR      = "fair"        # 2.0 - 2.9
    POOR      = "poor"        # < 2.0


UNGROUPED_LABEL = "other"


@dataclass(frozen=True)
class GroupOptions:
    by: GroupBy = GroupBy.PATIENT
    custom_groups: Optional[Dict[str, str]] = None   # patient_id -> group name


@dataclass(frozen=True)
class ComparisonFilters:
    """
    Record filters applied before comparison. Unset fields do not filter.

    ``min_assessments`` drops every record of a patient with fewer
    assessments (counted after the date and patient filters).
    """
    date_range: Optional[TimeRange] = None
    patient_ids: Optional[Tuple[str, ...]] = None
    min_assessments: Optional[int] = None
    exclude_outliers: bool = False

    def __post_init__(self):
        if self.patient_ids is not None:
            object.__setattr__(self, "patient_ids", tuple(self.patient_ids))


@dataclass(frozen=True)
class PatientGroup:
    """All assessments of one patient, as fed to the comparator."""
    patient_id: str
    records: Tuple[AssessmentRecord, ...] = field(default_factory=tuple)
    patient_name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "records", tuple(self.records))

    @property
    def display_name(self) -> str:
        return self.patient_name or self.patient_id

    def __len__(self) -> int:
        return len(self.records)
