"""Notification processor that forwards the notification XML to a downstream HTTP endpoint."""
from __future__ import annotations

from typing import Any

from loguru import logger

from connect_worker.app.core import SERVICE_NAME
from connect_worker.app.core.errors import NotificationProcessingError
from connect_worker.app.domain.envelope import parse_envelope_summary
from connect_worker.app.ports.http_client import AbstractHttpClient, HttpClientError, RequestTimeout


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class HttpForwardingNotificationProcessor:
    """NotificationProcessor that POSTs each notification to forward_url.

    Test notifications are forwarded too, flagged with X-Connect-Test so the
    receiving side can tell them apart.
    """

    def __init__(
        self,
        http_client: AbstractHttpClient,
        *,
        forward_url: str,
        timeout: RequestTimeout,
    ) -> None:
        self._http_client = http_client
        self._forward_url = forward_url
        self._timeout = timeout

    async def process(self, test: Any, xml: str) -> None:
        summary = parse_envelope_summary(xml) if xml else None
        headers = {
            "Content-Type": "application/xml",
            "X-Connect-Test": "true" if test else "false",
        }
        if summary is not None:
            headers["X-Envelope-Id"] = summary.envelope_id
            headers["X-Envelope-Status"] = summary.status

        try:
            response = await self._http_client.post(
                self._forward_url,
                timeout=self._timeout,
                content=xml.encode("utf-8"),
                headers=headers,
            )
            response.raise_for_status()
        except HttpClientError as exc:
            raise NotificationProcessingError(f"forwarding notification failed: {exc}") from exc

        _log(
            "notification_forwarded",
            envelope_id=headers.get("X-Envelope-Id", ""),
            status_code=response.status_code,
            test=bool(test),
        )
