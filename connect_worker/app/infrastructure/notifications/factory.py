"""Notification processor factory: forward over HTTP when a URL is configured, otherwise log only."""
from __future__ import annotations

from connect_worker.app.config.settings import Settings
from connect_worker.app.ports.http_client import AbstractHttpClient
from connect_worker.app.ports.notification_processor import NotificationProcessor
from connect_worker.app.infrastructure.http.factory import request_timeout_from_settings
from connect_worker.app.infrastructure.notifications.http_forwarding_processor import (
    HttpForwardingNotificationProcessor,
)
from connect_worker.app.infrastructure.notifications.logging_processor import LoggingNotificationProcessor


def create_notification_processor(
    settings: Settings,
    http_client: AbstractHttpClient,
) -> NotificationProcessor:
    forward_url = settings.notification_forward_url.strip()
    if forward_url:
        return HttpForwardingNotificationProcessor(
            http_client,
            forward_url=forward_url,
            timeout=request_timeout_from_settings(settings),
        )
    return LoggingNotificationProcessor()
