"""
Structured logging for the numtower namespace.

The library only emits records; nothing is configured on import beyond a
NullHandler on the package logger. Applications (or tests) call
setup_logging() to get console/file output in text or JSON form.
"""

import sys
import logging
from typing import Any, Dict, List
from datetime import datetime, timezone
import json
from pathlib import Path

from .config import settings

LIBRARY_LOGGER = "numtower"

# Attributes every LogRecord has; anything else came in through `extra`
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

logging.getLogger(LIBRARY_LOGGER).addHandler(logging.NullHandler())


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Structured context attached to a record, extra_data first."""
    context = dict(getattr(record, "extra_data", {}) or {})
    for key, value in vars(record).items():
        if key not in _RECORD_ATTRIBUTES and key != "extra_data":
            context.setdefault(key, value)
    return context


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; Decimal and MathContext values are stringified"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_record_context(record))
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with the structured context appended as key=value"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _record_context(record)
        if context:
            line += " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"
        return line


def setup_logging() -> None:
    """Attach handlers to the numtower logger according to settings"""

    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.WARNING)
    formatter = StructuredFormatter() if settings.LOG_FORMAT == "json" else TextFormatter()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    package_logger = logging.getLogger(LIBRARY_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        package_logger.addHandler(handler)
    package_logger.setLevel(log_level)


def get_logger(name: str) -> logging.Logger:
    """Logger for a numtower module (names outside the package are nested under it)"""
    if name != LIBRARY_LOGGER and not name.startswith(LIBRARY_LOGGER + "."):
        name = f"{LIBRARY_LOGGER}.{name}"
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """Logger carrying fixed context (e.g. which constant is being computed)"""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra_data = kwargs.pop("extra_data", {})
        extra = dict(kwargs.get("extra") or {})
        extra["extra_data"] = {**self.extra, **extra_data}
        kwargs["extra"] = extra
        return msg, kwargs


def get_context_logger(name: str, **context) -> LoggerAdapter:
    """Logger whose records all carry `context` in extra_data"""
    return LoggerAdapter(get_logger(name), context)


# Example:
# logger = get_context_logger(__name__, constant="pi")
# logger.debug("Computed constant", extra_data={"precision": 50, "terms": 49})
