"""
Structured Logging Configuration

Provides consistent logging across the analytics engine and its service layer.
"""
import logging
import sys
from typing import Optional
from datetime import datetime, timezone


class StructuredFormatter(logging.Formatter):
    """Formatter with timestamped, colored, single-line output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        record.timestamp = datetime.now(timezone.utc).isoformat()

        if self.use_color:
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            reset = self.COLORS['RESET']
        else:
            color = reset = ""

        log_message = (
            f"{color}[{record.timestamp}] "
            f"{record.levelname:8} "
            f"[{record.name}] "
            f"{record.getMessage()}{reset}"
        )

        if record.exc_info:
            log_message += f"\n{self.formatException(record.exc_info)}"

        return log_message


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure package-wide logging.

    Only the ``rehab_analytics`` logger tree is touched, so embedding the
    engine in a larger application leaves the host's root logger alone.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
    """
    package_logger = logging.getLogger("rehab_analytics")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    package_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
        ))
        package_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
