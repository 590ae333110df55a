"""HTTP client port: contract for performing POST requests.

Application and infrastructure adapters (credential provider, notification
forwarder) depend on this port; the httpx adapter implements it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, runtime_checkable

from connect_worker.app.core.errors import WorkerError


class HttpClientError(WorkerError):
    """Base for HTTP client failures (status, network, etc.)."""


class HttpClientTimeoutError(HttpClientError):
    """Raised when the request times out."""


@runtime_checkable
class HttpResponse(Protocol):
    """Minimal read-only view of an HTTP response."""

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def text(self) -> str: ...

    @property
    def status_code(self) -> int: ...

    @property
    def url(self) -> str: ...

    def json(self) -> Any: ...

    def raise_for_status(self) -> None: ...


@dataclass(frozen=True)
class RequestTimeout:
    """Connect and read timeouts in seconds."""

    connect_seconds: float
    read_seconds: float


@runtime_checkable
class AbstractHttpClient(Protocol):
    """Port: perform POST requests. Implementations live in infrastructure."""

    async def post(
        self,
        url: str,
        *,
        timeout: RequestTimeout,
        data: Mapping[str, str] | None = None,
        content: str | bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> HttpResponse:
        """Perform POST; raise HttpClientTimeoutError or HttpClientError on transport failure.

        Non-2xx responses are returned, not raised; callers decide via raise_for_status().
        """
        ...

    async def close(self) -> None:
        """Release resources (e.g. connection pool). No-op allowed if nothing to close."""
        ...
