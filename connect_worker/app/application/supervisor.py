"""
Connection supervisor: owns the queue session (namespace, queue client, receiver).

start_session() always releases the previous session first, so calling it again is a
restart. Releasing is best effort: close errors are logged and never block the new
session. Opening errors are logged, followed by a fixed delay and a restart request;
they never propagate to the listener loop.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from loguru import logger

from connect_worker.app.application.dispatcher import NotificationDispatcher
from connect_worker.app.application.restart_signal import RestartSignal
from connect_worker.app.core import SERVICE_NAME
from connect_worker.app.ports.incoming_message import IncomingMessage
from connect_worker.app.ports.queue_transport import (
    Namespace,
    QueueClient,
    QueueTransport,
    ReceiveMode,
    Receiver,
)


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class ConnectionSupervisor:
    """MessageHandler registered on every receiver it opens."""

    def __init__(
        self,
        transport: QueueTransport,
        dispatcher: NotificationDispatcher,
        restart_signal: RestartSignal,
        *,
        connection_string: str,
        queue_name: str,
        start_failure_delay_seconds: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._dispatcher = dispatcher
        self._restart_signal = restart_signal
        self._connection_string = connection_string
        self._queue_name = queue_name
        self._start_failure_delay_seconds = start_failure_delay_seconds
        self._sleep = sleep
        self._namespace: Namespace | None = None
        self._queue_client: QueueClient | None = None
        self._receiver: Receiver | None = None
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    async def start_session(self) -> None:
        await self._release_session()
        try:
            self._namespace = await self._transport.open_namespace(self._connection_string)
            self._queue_client = await self._namespace.create_queue_client(self._queue_name)
            self._receiver = await self._queue_client.create_receiver(ReceiveMode.PEEK_LOCK)
            await self._receiver.register_handler(self, auto_complete=False)
            self._active = True
            _log("session_started", queue=self._queue_name)
        except Exception as exc:
            logger.opt(exception=exc).error("error while starting the queue: {}", exc)
            await self._sleep(self._start_failure_delay_seconds)
            self._restart_signal.request()

    async def on_message(self, message: IncomingMessage) -> None:
        await self._dispatcher.handle(message)

    async def on_error(self, error: BaseException) -> None:
        logger.opt(exception=error).error("exception while processing a message: {}", error)
        self._restart_signal.request()
        _log("restart_requested", reason=type(error).__name__)

    async def close(self) -> None:
        await self._release_session()
        _log("session_closed", queue=self._queue_name)

    async def _release_session(self) -> None:
        self._active = False
        handles = (
            ("receiver", self._receiver),
            ("queue client", self._queue_client),
            ("namespace", self._namespace),
        )
        self._receiver = None
        self._queue_client = None
        self._namespace = None
        for name, handle in handles:
            if handle is None:
                continue
            try:
                await handle.close()
            except Exception as exc:
                logger.warning("{} close failed (continuing): {}", name, exc)
