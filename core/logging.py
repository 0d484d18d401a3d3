"""
Logging configuration for dashframe.

Two destinations:

  - File: always DEBUG level, one file per session under <data_dir>/logs/
  - Console: DEBUG if --verbose, WARNING+ otherwise
  - Format: "timestamp | level | name | tag | message"
  - Config console_format options:
    - "simple" — (default) bare messages for DEBUG/INFO, [LEVEL] prefix for WARNING+
    - "full"   — same structured format as the file handler
    - "clean"  — no console output at all (file logging still active)

Library modules only call ``logging.getLogger("dashframe")``; nothing is
written anywhere until ``setup_logging()`` installs the handlers.
"""

import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional

import config

LOGGER_NAME = "dashframe"

# Tags used with ``extra=tagged("...")`` on ingestion/display milestones.
KNOWN_TAGS = frozenset({
    "ingest",       # frames loaded / rows appended
    "display",      # display values computed
    "error",        # log_error(): real errors with context/stack traces
})


def tagged(tag: str) -> dict:
    """Return ``extra`` dict for logger calls: ``logger.debug("...", extra=tagged("x"))``."""
    return {"log_tag": tag}


_current_log_file: Optional[Path] = None


def get_log_dir() -> Path:
    """Directory holding the per-session log files."""
    return config.get_data_dir() / "logs"


class _TagFilter(logging.Filter):
    """Makes sure every record carries a ``log_tag`` attribute."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "log_tag", ""):
            record.log_tag = "-"
        return True


class _ConsoleFormatter(logging.Formatter):
    """Console formatter: shows [LEVEL] prefix only for WARNING and above."""

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            return f"  [{record.levelname}] {record.getMessage()}"
        return f"  {record.getMessage()}"


def setup_logging(verbose: bool = False, log_to_file: bool = True) -> logging.Logger:
    """Configure logging for dashframe.

    Args:
        verbose: If True, show DEBUG level on console; otherwise WARNING only
        log_to_file: Write a per-session log file under the data directory

    Returns:
        Configured logger instance
    """
    global _current_log_file

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # Capture everything, filter at handler level

    # Clear existing handlers (in case of re-init)
    logger.handlers.clear()
    logger.filters.clear()
    logger.addFilter(_TagFilter())

    file_format = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(log_tag)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if log_to_file:
        log_dir = get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        session_timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = log_dir / f"dashframe_{session_timestamp}.log"
        _current_log_file = log_file
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    console_format = config.CONSOLE_FORMAT

    if console_format != "clean":
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
        if console_format == "full":
            console_handler.setFormatter(file_format)
        else:
            console_handler.setFormatter(_ConsoleFormatter())
        logger.addHandler(console_handler)

    logger.debug(f"Logging started at {datetime.now().isoformat()}")
    if _current_log_file is not None:
        logger.debug(f"Log file: {_current_log_file}")

    return logger


def get_logger() -> logging.Logger:
    """Get the dashframe logger instance.

    Returns:
        The dashframe logger (creates with defaults if not configured)
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        return setup_logging(verbose=False)
    return logger


def log_error(
    message: str,
    exc: Optional[Exception] = None,
    context: Optional[dict] = None,
) -> None:
    """Log an error with full details including stack trace.

    Args:
        message: Error description
        exc: Optional exception to include stack trace from
        context: Optional dict of additional context (file, options, etc.)
    """
    logger = get_logger()

    lines = [message]

    if context:
        lines.append("Context:")
        for key, value in context.items():
            lines.append(f"  {key}: {value}")

    if exc:
        lines.append(f"Exception type: {type(exc).__name__}")
        lines.append(f"Exception message: {exc}")
        lines.append("Stack trace:")
        lines.append(traceback.format_exc())

    logger.error("\n".join(lines), extra=tagged("error"))


def get_current_log_path() -> Optional[Path]:
    """Return the path to the current session's log file (None if file logging is off)."""
    return _current_log_file
