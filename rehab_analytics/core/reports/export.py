"""
Comparison Export

Serialises a ComparisonResult for the export collaborator. Two shapes:

  JSON envelope
      {
        "metadata": {"exportDate", "comparisonMode", "scope", "settings"?},
        "data":     <result dict, omitted for the charts scope>,
        "summary":  {"comparisonType", "dataPoints", "generatedAt"}
      }

  CSV text
      One header row plus one row per dimension (time mode) or per patient
      (patient and progress modes).

Nothing here writes to disk; callers receive strings/dicts.
"""
from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

from rehab_analytics.core.comparison.base import ComparisonMode, ComparisonResult
from rehab_analytics.core.scoring import ALL_DIMENSIONS, Dimension
from rehab_analytics.utils import get_logger

logger = get_logger(__name__)


class ExportScope(str, Enum):
    SUMMARY  = "summary"
    DETAILED = "detailed"
    CHARTS   = "charts"
    ALL      = "all"


_SETTINGS_SCOPES = (ExportScope.DETAILED, ExportScope.ALL)


def build_export_envelope(
    result: Optional[ComparisonResult],
    mode: Union[ComparisonMode, str],
    scope: Union[ExportScope, str] = ExportScope.SUMMARY,
    settings: Optional[Dict[str, Any]] = None,
    dimensions: Optional[Iterable[Dimension]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Wrap a comparison result in the export envelope.

    ``data`` is left out for the charts scope or when there is no result;
    ``metadata.settings`` is present only for the detailed and all scopes.
    """
    mode = ComparisonMode(mode)
    scope = ExportScope(scope)
    stamp = (now or datetime.now(timezone.utc)).isoformat()

    metadata: Dict[str, Any] = {
        "exportDate": stamp,
        "comparisonMode": mode.value,
        "scope": scope.value,
    }
    if scope in _SETTINGS_SCOPES and settings is not None:
        metadata["settings"] = settings

    envelope: Dict[str, Any] = {"metadata": metadata}
    if scope is not ExportScope.CHARTS and result is not None:
        envelope["data"] = result.to_dict(dimensions)

    envelope["summary"] = {
        "comparisonType": mode.value,
        "dataPoints": result.data_points if result is not None else 0,
        "generatedAt": stamp,
    }
    return envelope


def export_json(envelope: Dict[str, Any]) -> str:
    return json.dumps(envelope, indent=2, ensure_ascii=False)


def _time_rows(result: ComparisonResult) -> List[List[Any]]:
    tc = result.time_comparison
    rows: List[List[Any]] = [["dimension", "current_average", "previous_average", "difference", "change_rate", "significant"]]
    if tc is None:
        return rows
    for d in ALL_DIMENSIONS:
        rows.append([
            d.value,
            round(tc.current_average.get(d), 3),
            round(tc.previous_average.get(d), 3),
            round(tc.difference[d], 3),
            round(tc.change_rate[d], 1),
            tc.significance[d],
        ])
    return rows


def _patient_rows(result: ComparisonResult) -> List[List[Any]]:
    rows: List[List[Any]] = [["patient_id", "patient_name", *[d.value for d in ALL_DIMENSIONS], "rank", "percentile"]]
    for p in result.patient_comparisons:
        rows.append([
            p.patient_id,
            p.patient_name or "",
            *[round(p.average_scores.get(d), 3) for d in ALL_DIMENSIONS],
            p.rank,
            p.percentile,
        ])
    return rows


def _progress_rows(result: ComparisonResult) -> List[List[Any]]:
    rows: List[List[Any]] = [[
        "patient_id", "assessment_count",
        *[f"{d.value}_slope" for d in ALL_DIMENSIONS],
        "overall_trend", "overall_r_squared", "reliability",
    ]]
    for a in result.progress_analyses:
        rows.append([
            a.patient_id,
            a.assessment_count,
            *[round(a.slopes[d], 4) for d in ALL_DIMENSIONS],
            a.trends[Dimension.OVERALL].value,
            round(a.r_squared[Dimension.OVERALL], 3),
            round(a.reliability, 3),
        ])
    return rows


_ROW_BUILDERS = {
    ComparisonMode.TIME: _time_rows,
    ComparisonMode.PATIENT: _patient_rows,
    ComparisonMode.PROGRESS: _progress_rows,
}


def export_csv(result: ComparisonResult) -> str:
    """Render a result as CSV text (header row always present)."""
    rows = _ROW_BUILDERS[result.mode](result)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(rows)
    logger.debug(f"export_csv [{result.mode.value}]: {len(rows) - 1} data row(s)")
    return buffer.getvalue()


def export_filename(
    mode: Union[ComparisonMode, str],
    scope: Union[ExportScope, str],
    now: Optional[datetime] = None,
) -> str:
    """e.g. ``assessment_comparison_time_summary_20240315_142530``"""
    now = now or datetime.now()
    return (
        f"assessment_comparison_{ComparisonMode(mode).value}_{ExportScope(scope).value}_"
        f"{now.strftime('%Y%m%d')}_{now.strftime('%H%M%S')}"
    )
