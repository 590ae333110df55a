"""Loguru sink configuration: timestamped plain-text lines with the bound event and fields."""
from __future__ import annotations

import sys
from typing import Any

from loguru import logger

from connect_worker.app.config.settings import Settings
from connect_worker.app.core import SERVICE_NAME

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS!UTC}</green> | <level>{level: <8}</level> | "
    "{extra[service_name]} | {extra[event]} {message} {extra[details]}"
)

_RESERVED_EXTRA = {"service_name", "event", "details"}


def _render_details(record: dict[str, Any]) -> None:
    extra = record["extra"]
    extra.setdefault("service_name", SERVICE_NAME)
    extra.setdefault("event", "-")
    extra["details"] = " ".join(
        f"{key}={value}" for key, value in extra.items() if key not in _RESERVED_EXTRA
    )


def configure_logging(settings: Settings) -> None:
    """Replace loguru's default sink with a single stderr sink at the configured level."""
    level = "DEBUG" if settings.debug else settings.log_level
    logger.remove()
    logger.configure(patcher=_render_details)
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, backtrace=False, diagnose=False)
