from __future__ import annotations

from typing import Any

from loguru import logger

from connect_worker.app.constants import DEAD_LETTER_REASON
from connect_worker.app.core import SERVICE_NAME
from connect_worker.app.core.errors import MalformedMessageError
from connect_worker.app.ports.incoming_message import IncomingMessage
from connect_worker.app.ports.notification_processor import NotificationProcessor


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class NotificationDispatcher:
    """
    Routes one delivered message to the notification processor and settles it.

    complete() is called only after process() returned. A null body is dead-lettered
    without calling the processor. Processor exceptions propagate to the caller and
    the message is left unsettled; the receiver's error callback deals with them.
    """

    def __init__(self, processor: NotificationProcessor, *, debug: bool = False) -> None:
        self._processor = processor
        self._debug = debug

    async def handle(self, message: IncomingMessage) -> None:
        message_id = message.message_id
        if self._debug:
            _log("message_processing", message_id=message_id)

        try:
            body = message.body
        except MalformedMessageError as exc:
            logger.warning("malformed body in message id {}: {}", message_id, exc)
            await message.dead_letter(DEAD_LETTER_REASON.MALFORMED_BODY)
            return

        if body is None:
            _log("message_null_body", message_id=message_id)
            await message.dead_letter(DEAD_LETTER_REASON.NULL_BODY)
            return

        await self._processor.process(body.test, body.xml)
        await message.complete()
        _log("message_completed", message_id=message_id)
