"""Port: notification-processing collaborator."""
from __future__ import annotations

from typing import Any, Protocol


class NotificationProcessor(Protocol):
    async def process(self, test: Any, xml: str) -> None:
        """Handle one notification. Returns on success, raises on failure."""
        ...
