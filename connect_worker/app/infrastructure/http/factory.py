"""HTTP client factory: builds AbstractHttpClient from settings (no provider logic in composition)."""
from __future__ import annotations

import httpx

from connect_worker.app.config.settings import Settings
from connect_worker.app.ports.http_client import AbstractHttpClient, RequestTimeout
from connect_worker.app.infrastructure.http.httpx_client import HttpxHttpClient


def create_http_client(settings: Settings) -> AbstractHttpClient:
    """Build an HTTP client from settings. Timeouts are applied per-request by the adapter."""
    async_client = httpx.AsyncClient()
    return HttpxHttpClient(async_client)


def request_timeout_from_settings(settings: Settings) -> RequestTimeout:
    return RequestTimeout(
        connect_seconds=settings.http_connect_timeout_seconds,
        read_seconds=settings.http_read_timeout_seconds,
    )
