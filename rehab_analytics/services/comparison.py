"""
Comparison Service

Orchestrates one comparison cycle: applies the caller's filters to the
in-memory records handed over by the data layer, runs the engine in the
requested mode, and returns a ComparisonRun for presentation or export.

All knobs travel in a single ComparisonSettings object; nothing is read
from global state at call time.

Usage:
    from rehab_analytics.services import ComparisonService, ComparisonSettings

    service = ComparisonService()
    run = service.run(records, ComparisonSettings(mode="patient"))
    payload = run.to_dict()
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rehab_analytics import config
from rehab_analytics.core.comparison import (
    ComparisonMode,
    ComparisonResult,
    compare_patients,
    compare_periods,
)
from rehab_analytics.core.grouping import ComparisonFilters, apply_comparison_filters, group_by_patient
from rehab_analytics.core.periods import ComparisonPeriod, TimeRange, TimeRangePair
from rehab_analytics.core.progress import analyze_progress_many
from rehab_analytics.core.reports import ExportScope, build_export_envelope
from rehab_analytics.core.scoring import AssessmentRecord, Dimension
from rehab_analytics.utils import get_logger, InvalidPeriodError

logger = get_logger(__name__)


@dataclass(frozen=True)
class ComparisonSettings:
    """
    Everything one comparison cycle needs besides the records.

    ``current_range``/``previous_range`` are required only for the custom
    period. ``date_range`` narrows records for patient and progress modes;
    time mode derives its windows from ``period`` instead.
    """
    mode: ComparisonMode = ComparisonMode.TIME
    period: ComparisonPeriod = ComparisonPeriod.MONTH
    reference_date: Optional[datetime] = None
    current_range: Optional[TimeRange] = None
    previous_range: Optional[TimeRange] = None
    date_range: Optional[TimeRange] = None
    selected_patients: Tuple[str, ...] = ()
    selected_dimensions: Optional[Tuple[Dimension, ...]] = None
    min_assessments: Optional[int] = None
    exclude_outliers: bool = False
    trend_threshold: float = config.TREND_THRESHOLD
    max_workers: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "mode", ComparisonMode(self.mode))
        try:
            object.__setattr__(self, "period", ComparisonPeriod(self.period))
        except ValueError as exc:
            raise InvalidPeriodError(
                f"Unknown comparison period: {self.period!r}", period=str(self.period)
            ) from exc
        object.__setattr__(self, "selected_patients", tuple(self.selected_patients or ()))
        if self.selected_dimensions is not None:
            object.__setattr__(
                self, "selected_dimensions", tuple(Dimension(d) for d in self.selected_dimensions)
            )

    def filters(self) -> ComparisonFilters:
        return ComparisonFilters(
            date_range=None if self.mode is ComparisonMode.TIME else self.date_range,
            patient_ids=self.selected_patients or None,
            min_assessments=self.min_assessments,
            exclude_outliers=self.exclude_outliers,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "period": self.period.value,
            "reference_date": self.reference_date.isoformat() if self.reference_date else None,
            "current_range": self.current_range.to_dict() if self.current_range else None,
            "previous_range": self.previous_range.to_dict() if self.previous_range else None,
            "date_range": self.date_range.to_dict() if self.date_range else None,
            "selected_patients": list(self.selected_patients),
            "selected_dimensions": (
                [d.value for d in self.selected_dimensions] if self.selected_dimensions is not None else None
            ),
            "min_assessments": self.min_assessments,
            "exclude_outliers": self.exclude_outliers,
            "trend_threshold": self.trend_threshold,
        }


@dataclass
class ComparisonRun:
    """Outcome of one orchestration cycle."""
    settings: ComparisonSettings
    result: ComparisonResult
    record_count: int = 0
    ranges: Optional[TimeRangePair] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def mode(self) -> ComparisonMode:
        return self.result.mode

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "record_count": self.record_count,
            "ranges": self.ranges.to_dict() if self.ranges else None,
            "result": self.result.to_dict(self.settings.selected_dimensions),
            "data_points": self.result.data_points,
            "warnings": list(self.warnings),
        }


class ComparisonService:
    """
    Runs the comparison engine for one settings object.

    Stateless: safe to share between threads / concurrent requests.
    """

    def run(self, records: Sequence[AssessmentRecord], settings: ComparisonSettings) -> ComparisonRun:
        """
        Filter ``records`` per ``settings`` and run the selected comparison.

        Insufficient data for progress analysis is reported through
        ``warnings`` with an empty result, never raised; period errors
        (InvalidPeriodError) propagate to the caller.
        """
        filtered = apply_comparison_filters(records, settings.filters())
        logger.info(
            f"ComparisonService [{settings.mode.value}]: {len(filtered)} of {len(records)} record(s) after filters"
        )

        if settings.mode is ComparisonMode.TIME:
            run = self._run_time(filtered, settings)
        elif settings.mode is ComparisonMode.PATIENT:
            run = self._run_patient(filtered, settings)
        else:
            run = self._run_progress(filtered, settings)

        run.record_count = len(filtered)
        for warning in run.warnings:
            logger.info(f"ComparisonService [{settings.mode.value}]: {warning}")
        return run

    def _run_time(self, records: List[AssessmentRecord], settings: ComparisonSettings) -> ComparisonRun:
        comparison, ranges = compare_periods(
            records,
            settings.period,
            settings.reference_date,
            current=settings.current_range,
            previous=settings.previous_range,
        )
        warnings = []
        if comparison.current_count == 0 and comparison.previous_count == 0:
            warnings.append("No assessments fall in either comparison window")
        elif comparison.previous_count == 0:
            warnings.append("No assessments in the previous window; change rates use a zero baseline")
        return ComparisonRun(
            settings=settings,
            result=ComparisonResult.of_time(comparison),
            ranges=ranges,
            warnings=warnings,
        )

    def _run_patient(self, records: List[AssessmentRecord], settings: ComparisonSettings) -> ComparisonRun:
        comparisons = compare_patients(group_by_patient(records))
        warnings = [] if comparisons else ["No patients to compare"]
        return ComparisonRun(settings=settings, result=ComparisonResult.of_patients(comparisons), warnings=warnings)

    def _run_progress(self, records: List[AssessmentRecord], settings: ComparisonSettings) -> ComparisonRun:
        analyses, skipped = analyze_progress_many(
            group_by_patient(records),
            trend_threshold=settings.trend_threshold,
            max_workers=settings.max_workers,
        )
        warnings = [
            f"Patient {patient_id} has fewer than {config.MIN_PROGRESS_ASSESSMENTS} assessments; progress not analysed"
            for patient_id in skipped
        ]
        if not analyses:
            warnings.append("Not enough assessments for progress analysis")
        return ComparisonRun(settings=settings, result=ComparisonResult.of_progress(analyses), warnings=warnings)

    @staticmethod
    def export(
        run: ComparisonRun,
        scope: ExportScope = ExportScope.SUMMARY,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Wrap a run's result in the export envelope."""
        return build_export_envelope(
            run.result,
            run.mode,
            scope=scope,
            settings=run.settings.to_dict(),
            dimensions=run.settings.selected_dimensions,
            now=now,
        )
