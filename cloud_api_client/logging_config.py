"""Log formatting for request and job-polling records, with credential redaction."""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any

from .config import LoggingConfig

_EXTRA_FIELDS = ("command", "method", "status_code", "job_id", "job_status", "attempt", "elapsed_seconds")

# Query parameters that carry credentials; request URLs are logged at DEBUG.
_SECRET_QUERY = re.compile(r"(?<=[?&])(apiKey|signature)=[^&\s]*")


def redact_query(text: str) -> str:
    """Mask credential-bearing query parameters in a URL or request line."""
    return _SECRET_QUERY.sub(r"\1=***", text)


def _structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = {}
    for key in _EXTRA_FIELDS:
        val = getattr(record, key, None)
        if val is not None:
            fields[key] = val
    return fields


class RedactingFilter(logging.Filter):
    """Rewrites the rendered message so no formatter ever sees an API key or signature."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_query(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, thread, message and structured fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        payload.update(_structured_fields(record))
        if record.exc_info and record.exc_info[1]:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)

    def formatException(self, ei) -> str:
        return redact_query(super().formatException(ei))


class TextFormatter(logging.Formatter):
    """Human-readable lines; structured fields are appended as key=value."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        fields = _structured_fields(record)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line

    def formatException(self, ei) -> str:
        return redact_query(super().formatException(ei))


def configure_logging(config: LoggingConfig) -> None:
    """Install a single redacting stderr handler on the root logger."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if config.format == "json" else TextFormatter())
    handler.addFilter(RedactingFilter())
    root.addHandler(handler)

    for noisy in ("urllib3", "requests"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
