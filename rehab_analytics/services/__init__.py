"""
Service Layer

Orchestration of the comparison engine for the HTTP app and other callers.
"""
from .comparison import ComparisonRun, ComparisonService, ComparisonSettings

__all__ = [
    "ComparisonRun",
    "ComparisonService",
    "ComparisonSettings",
]
