"""JSON logging for pipeline runs and the export script.

Pipeline modules pass route context through ``extra=``, for example
``logger.warning(..., extra={"route_id": route_id})``; the formatter copies
those fields into the JSON line when they are set.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

ROUTE_CONTEXT_FIELDS = ("route_id", "time_range", "seed", "records", "output_path")
LOG_LEVEL_ENV = "LOG_LEVEL"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            {
                field: getattr(record, field)
                for field in ROUTE_CONTEXT_FIELDS
                if getattr(record, field, None) is not None
            }
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        # Dates from pipeline views are serialized as ISO strings.
        return json.dumps(payload, ensure_ascii=True, default=str)


def resolve_log_level(default_level: str | int = logging.INFO) -> str | int:
    level = os.environ.get(LOG_LEVEL_ENV, default_level)
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
    return level


def setup_logging(default_level: str | int = logging.INFO) -> None:
    """Send JSON lines to stderr at ``LOG_LEVEL`` (or ``default_level``)."""
    root = logging.getLogger()
    root.setLevel(resolve_log_level(default_level))

    stream_handlers = [
        handler for handler in root.handlers if isinstance(handler, logging.StreamHandler)
    ]
    if not stream_handlers:
        stream_handlers = [logging.StreamHandler()]
        root.addHandler(stream_handlers[0])
    for handler in stream_handlers:
        handler.setFormatter(JsonFormatter())
