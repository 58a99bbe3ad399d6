"""Utility helpers for structured logging."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "channel-flags"


def configure_logging(level: str = "INFO", app_env: str | None = None) -> None:
    """Send JSON records to stderr, tagged with the service name (and env when given)."""

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Remove default handlers to avoid duplicate logs during tests
    while logger.handlers:
        logger.handlers.pop()

    static_fields = {"service": SERVICE_NAME}
    if app_env:
        static_fields["env"] = app_env

    handler = logging.StreamHandler()
    handler.setFormatter(
        JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level"},
            static_fields=static_fields,
            timestamp=True,
            json_default=_json_default,
        )
    )
    logger.addHandler(handler)


def _json_default(value: object) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
