"""Structured logging for the news chat backend.

Key principle: Never log user messages, article text or generated answers.
Log operational metadata only (session ids, counts, timings, states).

All loggers share one handler installed on the ``newschat`` logger, so
module loggers only need ``get_logger(__name__)``.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from ..config import Settings, get_settings

ROOT_LOGGER_NAME = "newschat"

# Keyword arguments whose values are conversation or article content
SENSITIVE_FIELDS = frozenset(
    {
        "question",
        "text",
        "content",
        "prompt",
        "answer",
        "fragment",
        "history",
    }
)


def redact(value: Any) -> str:
    """Describe a sensitive value by its size only."""
    if isinstance(value, (list, tuple)):
        return f"[REDACTED - {len(value)} items]"
    return f"[REDACTED - {len(str(value))} chars]"


def sanitize(data: dict[str, Any]) -> dict[str, Any]:
    """Replace sensitive fields, recursing into nested dicts and lists of dicts."""
    sanitized = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_FIELDS:
            sanitized[key] = redact(value)
        elif isinstance(value, dict):
            sanitized[key] = sanitize(value)
        elif isinstance(value, list) and any(isinstance(item, dict) for item in value):
            sanitized[key] = [sanitize(item) if isinstance(item, dict) else item for item in value]
        else:
            sanitized[key] = value
    return sanitized


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        data = getattr(record, "data", None)
        if data:
            log_data["data"] = data

        audit = getattr(record, "audit", None)
        if audit:
            log_data["audit"] = audit

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class KeyValueFormatter(logging.Formatter):
    """Human-readable lines with the structured fields appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, "data", None) or getattr(record, "audit", None)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Install the shared handler on the package logger.

    Safe to call more than once; the handler is only added the first time.
    """
    settings = settings or get_settings()
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(settings.log_level)
    root.propagate = False

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if settings.log_format == "json":
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(KeyValueFormatter())
        root.addHandler(handler)

    return root


class AuditLogger:
    """Logger that takes structured keyword fields and never emits content."""

    def __init__(self, name: str):
        configure_logging()
        self.logger = logging.getLogger(name)

    def _log(self, level: int, message: str, fields: dict[str, Any], exc_info: bool = False) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, message, extra={"data": sanitize(fields)}, exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error with the active exception's traceback."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def audit(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Record a completed state change (session saved, collection rebuilt)."""
        audit_data = {
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            **sanitize(kwargs),
        }
        self.logger.info(f"AUDIT: {action} on {resource_type}", extra={"audit": audit_data})


def get_logger(name: str) -> AuditLogger:
    """Get an audit-safe logger instance."""
    return AuditLogger(name)
