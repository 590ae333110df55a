"""Port: abstraction for an incoming queue message. Implementations live in infrastructure."""
from __future__ import annotations

from typing import Protocol

from connect_worker.app.domain.models import NotificationBody


class IncomingMessage(Protocol):
    """Transport-agnostic incoming message. Application uses this; broker adapters implement it.

    Exactly one of complete() / dead_letter() may be applied; a second call raises
    MessageAlreadySettledError. Reading body raises MalformedMessageError when the
    payload cannot be decoded.
    """

    @property
    def message_id(self) -> str: ...

    @property
    def body(self) -> NotificationBody | None: ...

    @property
    def settled(self) -> bool: ...

    async def complete(self) -> None: ...

    async def dead_letter(self, reason: str) -> None: ...
