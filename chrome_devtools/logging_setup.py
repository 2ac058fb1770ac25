"""Logging setup for the DevTools client and CLI.

Wire traffic is logged at DEBUG (">>> Sending" / "<<< Received"), session and
wait progress at INFO, dropped protocol anomalies at WARNING.

Note: Named logging_setup.py to avoid conflicts with Python's built-in logging module.
"""

import sys
import json
import logging
from typing import Optional, Dict, Any, Union
from datetime import datetime, timezone

PACKAGE_LOGGER = "chrome_devtools"


class JSONFormatter(logging.Formatter):
    """One JSON object per log line.

    Example output:
        {"timestamp": "2026-10-19T10:15:00.123Z", "level": "INFO",
         "logger": "chrome_devtools.waiters", "message": "Selector found after 412ms",
         "extra": {"selector": "#login", "elapsed_ms": 412}}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra") and isinstance(record.extra, dict):
            log_data["extra"] = record.extra

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable log lines.

    Example output:
        2026-10-19 10:15:00 [INFO] chrome_devtools.session: Updated sessionId: 8E1F...
    """

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(
    format_type: str = "text",
    level: Optional[str] = None,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure root logging with the chosen format and level.

    Args:
        format_type: "json" or "text" (default: "text")
        level: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"; if None,
               determined by quiet/verbose flags
        quiet: Only errors (ERROR)
        verbose: Include wire traffic (DEBUG)

    Precedence: quiet > verbose > level > INFO.
    """
    if quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    elif level:
        log_level = getattr(logging, level.upper(), logging.INFO)
    else:
        log_level = logging.INFO

    formatter: Union[JSONFormatter, TextFormatter]
    if format_type == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    # stdout is reserved for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger(PACKAGE_LOGGER).setLevel(log_level)


def log_with_context(
    logger: logging.Logger, level: int, message: str, **extra_fields
) -> None:
    """Log message with structured fields (rendered under "extra" in JSON output).

    Example:
        log_with_context(
            logger, logging.INFO, "Selector found", selector="#login", elapsed_ms=412
        )
    """
    if not logger.isEnabledFor(level):
        return
    if extra_fields:
        record = logger.makeRecord(
            logger.name, level, "(log_with_context)", 0, message, (), None
        )
        record.extra = extra_fields
        logger.handle(record)
    else:
        logger.log(level, message)
