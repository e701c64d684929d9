"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    RehabAnalyticsError,
    InsufficientDataError,
    InvalidPeriodError,
    InvalidGroupingError,
    RecordParseError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "RehabAnalyticsError",
    "InsufficientDataError",
    "InvalidPeriodError",
    "InvalidGroupingError",
    "RecordParseError",
]
