"""Worker exception hierarchy."""
from __future__ import annotations

from typing import Any


class WorkerError(Exception):
    """Base for errors raised by the connect worker."""


class CredentialApiError(WorkerError):
    """The authorization server rejected the credential request with a structured body."""

    def __init__(self, status_code: int, body: dict[str, Any] | None) -> None:
        super().__init__(f"authorization server returned status {status_code}")
        self.status_code = status_code
        self.body = body


class MessageAlreadySettledError(WorkerError):
    """Raised when a second disposition is applied to a queue message."""


class MalformedMessageError(WorkerError):
    """Raised when a delivered message body cannot be decoded."""


class NotificationProcessingError(WorkerError):
    """Raised by notification processors when a notification cannot be handled."""


class TransportConnectionLost(WorkerError):
    """The broker connection or channel backing a receiver closed unexpectedly."""
