"""Logging setup with per-dispatch context.

Every record logged while a completion notification is handled carries the
survey and response IDs, so concurrent dispatches can be told apart::

    with LogContext(survey_id=100, response_id=42):
        logger.info("Delivering")  # JSON adds "survey_id": 100, "response_id": 42
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict

_log_context: ContextVar[Dict[str, Any]] = ContextVar("survey_webhook_log_context", default={})

# Libraries whose per-request INFO lines would drown out delivery logs
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access")


class LogContext:
    """Bind fields to every record logged inside the ``with`` block.

    Nested contexts add to the outer one; the previous fields are restored on exit.
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._token = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set({**_log_context.get(), **self.fields})
        return self

    def __exit__(self, *exc_info) -> None:
        _log_context.reset(self._token)


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get())


class ContextFilter(logging.Filter):
    """Copy the bound context onto each record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_log_context()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with context and ``extra={"extra": {...}}`` fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(getattr(record, "context", {}))
        log_data.update(getattr(record, "extra", {}))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Host data may hold dates or decimals
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines, coloured by level on a terminal."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        context = getattr(record, "context", {})
        if context or (self.use_colors and record.levelname in self.LEVEL_COLORS):
            # Work on a copy so other handlers see the record unchanged
            record = logging.makeLogRecord(record.__dict__)
        if context:
            fields = " ".join(f"{key}={value}" for key, value in context.items())
            record.msg = f"[{fields}] {record.msg}"
        if self.use_colors and record.levelname in self.LEVEL_COLORS:
            record.levelname = f"{self.LEVEL_COLORS[record.levelname]}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(level: str = "INFO", format_type: str = "json") -> None:
    """
    Send all logging to stderr in the chosen format.

    Args:
        level: Log level name, case-insensitive; unknown names mean INFO
        format_type: 'json' for structured lines, anything else for text
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JSONFormatter() if format_type.lower() == "json" else TextFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
