"""Structured JSON logging for the catalog service."""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

from catalog_api.core.config import settings

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record, ``extra`` fields nested under "extra"."""

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service:
            payload["service"] = self.service
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        extra = {key: value for key, value in record.__dict__.items() if key not in _RECORD_ATTRS}
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, default=str)


def resolve_level(name: str | None) -> int:
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else logging.INFO


def _logger_levels(level: int) -> dict[str, dict[str, Any]]:
    return {
        "uvicorn.error": {"level": level},
        "uvicorn.access": {"handlers": ["default"], "level": level, "propagate": False},
        "alembic": {"level": level},
        # Statement logging only when SQL_ECHO is on.
        "sqlalchemy.engine": {"level": logging.INFO if settings.SQL_ECHO else logging.WARNING},
    }


def setup_logging(level: str | None = None) -> None:
    """Route the app, uvicorn, alembic and SQLAlchemy loggers through one JSON handler."""
    resolved = resolve_level(level or settings.LOG_LEVEL)
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": JsonFormatter, "service": settings.PROJECT_NAME},
            },
            "handlers": {
                "default": {"class": "logging.StreamHandler", "formatter": "json"},
            },
            "root": {"handlers": ["default"], "level": resolved},
            "loggers": _logger_levels(resolved),
        }
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
