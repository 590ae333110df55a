"""Adapter: wrap aio_pika.IncomingMessage to implement ports.IncomingMessage."""
from __future__ import annotations

import json

import aio_pika
from aio_pika import IncomingMessage as AioPikaIncomingMessage
from aio_pika.abc import AbstractExchange

from connect_worker.app.core.errors import MalformedMessageError, MessageAlreadySettledError
from connect_worker.app.domain.models import NotificationBody
from connect_worker.app.infrastructure.messaging.rabbitmq.constants import DEAD_LETTER_REASON_HEADER


def decode_notification_body(raw_body: bytes) -> NotificationBody | None:
    """Decode a JSON `{"test": ..., "xml": "..."}` payload. Empty body or JSON null -> None."""
    if not raw_body or not raw_body.strip():
        return None
    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedMessageError(f"message body is not valid JSON: {exc}") from exc
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise MalformedMessageError("message body must be a JSON object")
    xml = payload.get("xml")
    if not isinstance(xml, str):
        raise MalformedMessageError("message body missing required field: xml")
    return NotificationBody(test=payload.get("test"), xml=xml)


class AioPikaMessageAdapter:
    """Implements connect_worker.app.ports.incoming_message.IncomingMessage for aio_pika.

    complete() acks the delivery. dead_letter() republishes the original body to the
    dead-letter exchange with the reason in a header, then acks. The message counts
    as settled only once the broker calls succeeded.
    """

    def __init__(
        self,
        message: AioPikaIncomingMessage,
        *,
        dead_letter_exchange: AbstractExchange,
        dead_letter_routing_key: str,
    ) -> None:
        self._message = message
        self._dead_letter_exchange = dead_letter_exchange
        self._dead_letter_routing_key = dead_letter_routing_key
        self._settled = False

    @property
    def message_id(self) -> str:
        return self._message.message_id or str(self._message.delivery_tag)

    @property
    def body(self) -> NotificationBody | None:
        return decode_notification_body(self._message.body)

    @property
    def settled(self) -> bool:
        return self._settled

    def _ensure_unsettled(self) -> None:
        if self._settled:
            raise MessageAlreadySettledError(f"message {self.message_id} already settled")

    async def complete(self) -> None:
        self._ensure_unsettled()
        await self._message.ack()
        self._settled = True

    async def dead_letter(self, reason: str) -> None:
        self._ensure_unsettled()
        headers = dict(self._message.headers or {})
        headers[DEAD_LETTER_REASON_HEADER] = reason
        await self._dead_letter_exchange.publish(
            aio_pika.Message(
                body=self._message.body,
                headers=headers,
                message_id=self.message_id,
                content_type=self._message.content_type,
                delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
            ),
            routing_key=self._dead_letter_routing_key,
        )
        await self._message.ack()
        self._settled = True
