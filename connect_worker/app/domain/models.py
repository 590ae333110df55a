"""Domain models."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from connect_worker.app.constants import READINESS_STATUS


@dataclass(frozen=True)
class NotificationBody:
    """Decoded queue payload: the Connect test marker and the notification XML."""

    test: Any
    xml: str


@dataclass(frozen=True)
class ReadinessResult:
    """Outcome of the pre-flight credential check (value object)."""

    status: str
    consent_url: str | None = None
    status_code: int | None = None
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ready(self) -> bool:
        return self.status == READINESS_STATUS.READY


@dataclass(frozen=True)
class EnvelopeSummary:
    """Identifying fields read from a Connect notification XML document."""

    envelope_id: str
    status: str
