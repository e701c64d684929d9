"""
Request/response schemas for the comparison API.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from rehab_analytics import config
from rehab_analytics.core.comparison import ComparisonMode
from rehab_analytics.core.periods import ComparisonPeriod, TimeRange
from rehab_analytics.core.reports import ExportScope
from rehab_analytics.core.scoring import AssessmentRecord, Dimension
from rehab_analytics.services import ComparisonSettings


Rating = Optional[int]


class ConcentrationTimeInput(BaseModel):
    duration: float = Field(0, ge=0, description="Minutes of sustained focus")
    environment: Optional[str] = None
    time_of_day: Optional[str] = None
    notes: Optional[str] = None


class MotivationLevelInput(BaseModel):
    goal_clarity: Rating = Field(None, ge=1, le=5)
    effort_willingness: Rating = Field(None, ge=1, le=5)
    confidence_level: Rating = Field(None, ge=1, le=5)
    external_support: Rating = Field(None, ge=1, le=5)
    notes: Optional[str] = None


class PastSuccessesInput(BaseModel):
    achievement_areas: List[str] = Field(default_factory=list)
    most_significant_achievement: Optional[str] = None
    learning_from_success: Optional[str] = None
    transferable_strategies: Optional[str] = None
    notes: Optional[str] = None


class ConstraintsInput(BaseModel):
    severity_rating: Rating = Field(None, ge=1, le=5)
    notes: Optional[str] = None


class SocialPreferenceInput(BaseModel):
    comfort_with_strangers: Rating = Field(None, ge=1, le=5)
    collaboration_willingness: Rating = Field(None, ge=1, le=5)
    group_size_preference: Optional[str] = None
    notes: Optional[str] = None


class AssessmentInput(BaseModel):
    """One assessment record as delivered by the data layer."""
    id: Optional[str] = None
    patient_id: str
    patient_name: Optional[str] = None
    assessor_id: Optional[str] = None
    assessed_at: datetime
    status: Literal["draft", "completed", "reviewed"] = "completed"
    concentration_time: ConcentrationTimeInput = Field(default_factory=ConcentrationTimeInput)
    motivation_level: MotivationLevelInput = Field(default_factory=MotivationLevelInput)
    past_successes: PastSuccessesInput = Field(default_factory=PastSuccessesInput)
    constraints: ConstraintsInput = Field(default_factory=ConstraintsInput)
    social_preference: SocialPreferenceInput = Field(default_factory=SocialPreferenceInput)

    def to_record(self) -> AssessmentRecord:
        return AssessmentRecord.from_dict(self.model_dump())


class TimeRangeInput(BaseModel):
    start: datetime
    end: datetime
    label: str = "Custom"

    def to_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end, label=self.label)


def _range(value: Optional[TimeRangeInput]) -> Optional[TimeRange]:
    return value.to_range() if value is not None else None


class ComparisonRequest(BaseModel):
    """Settings plus the already-authorised records to compare."""
    records: List[AssessmentInput] = Field(default_factory=list)
    mode: ComparisonMode = ComparisonMode.TIME
    period: ComparisonPeriod = ComparisonPeriod.MONTH
    reference_date: Optional[datetime] = None
    current_range: Optional[TimeRangeInput] = None
    previous_range: Optional[TimeRangeInput] = None
    date_range: Optional[TimeRangeInput] = None
    selected_patients: List[str] = Field(default_factory=list)
    selected_dimensions: Optional[List[Dimension]] = None
    min_assessments: Optional[int] = Field(None, ge=1)
    exclude_outliers: bool = False
    trend_threshold: float = Field(config.TREND_THRESHOLD, ge=0)
    max_workers: Optional[int] = Field(None, ge=1, le=32)

    def to_settings(self) -> ComparisonSettings:
        return ComparisonSettings(
            mode=self.mode,
            period=self.period,
            reference_date=self.reference_date,
            current_range=_range(self.current_range),
            previous_range=_range(self.previous_range),
            date_range=_range(self.date_range),
            selected_patients=tuple(self.selected_patients),
            selected_dimensions=tuple(self.selected_dimensions) if self.selected_dimensions is not None else None,
            min_assessments=self.min_assessments,
            exclude_outliers=self.exclude_outliers,
            trend_threshold=self.trend_threshold,
            max_workers=self.max_workers,
        )

    def to_records(self) -> List[AssessmentRecord]:
        return [r.to_record() for r in self.records]


class ExportRequest(ComparisonRequest):
    scope: ExportScope = ExportScope.SUMMARY
    format: Literal["json", "csv"] = "json"


class ComparisonResponse(BaseModel):
    mode: str
    record_count: int
    ranges: Optional[Dict[str, Any]] = None
    result: Dict[str, Any]
    data_points: int
    warnings: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    version: str
    modes: List[str]
