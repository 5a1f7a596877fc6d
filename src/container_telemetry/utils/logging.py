"""Logging configuration for the telemetry agent.

Structured fields are attached to a record with ``extra={"fields": {...}}``.
The JSON formatter merges them into the emitted object; the text formatter
appends them as ``key=value`` pairs.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.logging import RichHandler

from container_telemetry.core.schemas import LogFormat, LogLevel

FIELDS_ATTR = "fields"

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Structured fields attached to a log record, if any."""
    fields = getattr(record, FIELDS_ATTR, None)
    return fields if isinstance(fields, dict) else {}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, structured fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record_fields(record).items():
            if key not in log_obj:
                log_obj[key] = value
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


class TextFormatter(logging.Formatter):
    """Standard text lines with structured fields appended as key=value."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        fields = record_fields(record)
        if not fields:
            return line
        pairs = " ".join(f"{key}={_text_value(value)}" for key, value in fields.items())
        return f"{line} {pairs}"


def _text_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def setup_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_format: LogFormat | str = LogFormat.JSON,
    log_file: Path | str | None = None,
) -> None:
    """Configure logging for the agent.

    Args:
        level: Log level (debug, info)
        log_format: 'json' for one JSON object per line, 'text' for console output
        log_file: Optional file that receives a copy of every record
    """
    level_name = LogLevel(level.lower()).value.upper()
    log_format = LogFormat(log_format.lower())

    handlers: list[logging.Handler] = []

    if log_format is LogFormat.JSON:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        handlers.append(handler)
    else:
        rich_handler = RichHandler(
            level=level_name,
            rich_tracebacks=True,
            markup=False,
            show_time=True,
            show_path=False,
        )
        rich_handler.setFormatter(TextFormatter("%(message)s"))
        handlers.append(rich_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        if log_format is LogFormat.JSON:
            file_handler.setFormatter(JsonFormatter())
        else:
            file_handler.setFormatter(TextFormatter(_TEXT_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level_name),
        handlers=handlers,
        force=True,
    )

