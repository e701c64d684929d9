"""
Custom Exception Hierarchy

Structured error types raised by the analytics engine. Every error carries a
machine-readable code and a details dict so the service layer can hand it to
presentation unchanged.
"""
from typing import Optional, Dict, Any


class RehabAnalyticsError(Exception):
    """Base exception for all analytics engine errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class InsufficientDataError(RehabAnalyticsError):
    """Too few assessment records to compute the requested result."""

    def __init__(
        self,
        message: str,
        required: int = 2,
        actual: int = 0,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INSUFFICIENT_DATA",
            details={"required": required, "actual": actual, **(details or {})}
        )
        self.required = required
        self.actual = actual


class InvalidPeriodError(RehabAnalyticsError):
    """Comparison period cannot be turned into time ranges."""

    def __init__(
        self,
        message: str,
        period: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INVALID_PERIOD",
            details={"period": period, **(details or {})}
        )
        self.period = period


class InvalidGroupingError(RehabAnalyticsError):
    """Grouping options are incomplete or unknown."""

    def __init__(
        self,
        message: str,
        group_by: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="INVALID_GROUPING",
            details={"group_by": group_by, **(details or {})}
        )
        self.group_by = group_by


class RecordParseError(RehabAnalyticsError):
    """A raw assessment payload could not be turned into a record."""

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="RECORD_PARSE_ERROR",
            details={"field": field, **(details or {})}
        )
        self.field = field
