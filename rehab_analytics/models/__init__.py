"""
API Schemas
"""
from .comparison import (
    AssessmentInput,
    ComparisonRequest,
    ComparisonResponse,
    ExportRequest,
    HealthResponse,
    TimeRangeInput,
)

__all__ = [
    "AssessmentInput",
    "ComparisonRequest",
    "ComparisonResponse",
    "ExportRequest",
    "HealthResponse",
    "TimeRangeInput",
]
