"""Notification processor that only records what arrived."""
from __future__ import annotations

from typing import Any

from loguru import logger

from connect_worker.app.core import SERVICE_NAME
from connect_worker.app.domain.envelope import parse_envelope_summary


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class LoggingNotificationProcessor:
    """NotificationProcessor used when no downstream endpoint is configured."""

    async def process(self, test: Any, xml: str) -> None:
        if test:
            _log("test_notification_received", test=test)
            return
        summary = parse_envelope_summary(xml)
        _log(
            "notification_received",
            envelope_id=summary.envelope_id,
            envelope_status=summary.status,
        )
