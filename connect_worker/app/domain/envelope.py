"""Read envelope identity from Connect notification XML."""
from __future__ import annotations

import xml.etree.ElementTree as ElementTree

from connect_worker.app.core.errors import NotificationProcessingError
from connect_worker.app.domain.models import EnvelopeSummary


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ElementTree.Element, name: str) -> str:
    for child in element:
        if _local_name(child.tag) == name:
            return (child.text or "").strip()
    return ""


def parse_envelope_summary(xml: str) -> EnvelopeSummary:
    """Return envelope id and status from the first EnvelopeStatus element (namespace-agnostic).

    Missing elements yield empty strings; XML that is not well formed raises
    NotificationProcessingError.
    """
    try:
        root = ElementTree.fromstring(xml)
    except ElementTree.ParseError as exc:
        raise NotificationProcessingError(f"notification xml is not well formed: {exc}") from exc

    for element in root.iter():
        if _local_name(element.tag) == "EnvelopeStatus":
            return EnvelopeSummary(
                envelope_id=_child_text(element, "EnvelopeID"),
                status=_child_text(element, "Status"),
            )
    return EnvelopeSummary(envelope_id="", status="")
