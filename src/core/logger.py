"""
Structured JSON logging.

Каждая запись — одна JSON-строка. Поля события передаются через extra={"fields": {...}}
и сливаются в итоговый payload.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict


class JSONFormatter(logging.Formatter):
    """Formatter that outputs JSON strings for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            log_record.update(fields)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def get_logger(name: str, level: int | str | None = None) -> logging.Logger:
    """
    Returns a logger configured with JSON formatting.

    Handler добавляется один раз на имя логгера.
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)

    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    data: Dict[str, Any],
    level: int = logging.INFO,
) -> None:
    """Log a structured event; data is merged into the JSON payload."""
    logger.log(level, event, extra={"fields": {"event": event, **data}})
