"""
RabbitMQ queue transport: namespace (connection), queue client (channel + queues), receiver (consumer).

Lifecycle:
  open_namespace -> aio_pika.connect (non-robust: recovery belongs to the supervisor).
  create_queue_client -> channel with prefetch QoS, durable work queue, durable
  dead-letter exchange and `<queue>.dead-letter` queue bound to it.
  create_receiver -> register_handler starts queue.consume with the receiver's delivery callback.
  close() on each level is idempotent.

Failure reporting:
  A delivery whose handler raises is reported to handler.on_error while the receiver is
  still consuming; the delivery stays unacked. Failures that finish after the receiver
  was closed are logged and dropped. An unexpected channel or connection close is
  reported to the on_error of every receiver opened through it. Close callbacks may run outside the event loop
  callback context, so reports are scheduled with call_soon_threadsafe.
"""
from __future__ import annotations

import asyncio
from typing import Any

import aio_pika
from aio_pika import IncomingMessage as AioPikaIncomingMessage
from aio_pika.abc import AbstractChannel, AbstractConnection, AbstractExchange, AbstractQueue
from loguru import logger

from connect_worker.app.core import SERVICE_NAME
from connect_worker.app.core.errors import TransportConnectionLost
from connect_worker.app.infrastructure.messaging.rabbitmq.aio_pika_message_adapter import AioPikaMessageAdapter
from connect_worker.app.infrastructure.messaging.rabbitmq.constants import DEAD_LETTER_SUFFIX, ReceiverState
from connect_worker.app.ports.queue_transport import MessageHandler, ReceiveMode


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def dead_letter_name(queue_name: str) -> str:
    return f"{queue_name}{DEAD_LETTER_SUFFIX}"


def _close_reason(args: tuple[Any, ...], what: str) -> BaseException:
    # aio_pika calls close callbacks as (sender, exc).
    exc = args[1] if len(args) > 1 else None
    if isinstance(exc, BaseException):
        return TransportConnectionLost(f"{what} closed: {exc!r}")
    return TransportConnectionLost(f"{what} closed")


class RabbitMQReceiver:
    """Receiver implementation"""

    def __init__(
        self,
        channel: AbstractChannel,
        queue: AbstractQueue,
        *,
        mode: ReceiveMode,
        dead_letter_exchange: AbstractExchange,
        dead_letter_routing_key: str,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._channel = channel
        self._queue = queue
        self._mode = mode
        self._dead_letter_exchange = dead_letter_exchange
        self._dead_letter_routing_key = dead_letter_routing_key
        self._loop = loop
        self._state = ReceiverState.OPEN
        self._handler: MessageHandler | None = None
        self._auto_complete = False
        self._consumer_tag: str | None = None
        self._error_tasks: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> ReceiverState:
        return self._state

    async def register_handler(self, handler: MessageHandler, *, auto_complete: bool) -> None:
        if self._state is not ReceiverState.OPEN:
            raise RuntimeError(f"receiver cannot register a handler in state {self._state.value}")
        self._handler = handler
        self._auto_complete = auto_complete
        self._consumer_tag = await self._queue.consume(self._on_delivery, no_ack=False)
        self._state = ReceiverState.CONSUMING
        _log("receiver_consuming", queue=self._queue.name, mode=self._mode.value)

    async def _on_delivery(self, raw_message: AioPikaIncomingMessage) -> None:
        handler = self._handler
        if handler is None:
            return
        message = AioPikaMessageAdapter(
            raw_message,
            dead_letter_exchange=self._dead_letter_exchange,
            dead_letter_routing_key=self._dead_letter_routing_key,
        )
        try:
            await handler.on_message(message)
            if self._auto_complete and not message.settled:
                await message.complete()
        except Exception as exc:
            if self._state is not ReceiverState.CONSUMING:
                # Delivery outlived its receiver.
                logger.warning("dropping failure from closed receiver on {}: {}", self._queue.name, exc)
                return
            await handler.on_error(exc)

    def report_error(self, error: BaseException) -> None:
        """Schedule handler.on_error(error) on the receiver's loop; no-op once closing."""
        if self._state is not ReceiverState.CONSUMING or self._handler is None:
            return
        handler = self._handler

        def schedule() -> None:
            task = self._loop.create_task(handler.on_error(error))
            self._error_tasks.add(task)
            task.add_done_callback(self._error_tasks.discard)

        self._loop.call_soon_threadsafe(schedule)

    async def close(self) -> None:
        if self._state in (ReceiverState.CLOSING, ReceiverState.CLOSED):
            return
        self._state = ReceiverState.CLOSING
        consumer_tag, self._consumer_tag = self._consumer_tag, None
        try:
            if consumer_tag is not None and not self._channel.is_closed:
                await self._queue.cancel(consumer_tag)
        finally:
            self._handler = None
            self._state = ReceiverState.CLOSED


class RabbitMQQueueClient:
    """QueueClient implementation: one channel per queue client."""

    def __init__(
        self,
        channel: AbstractChannel,
        queue: AbstractQueue,
        dead_letter_exchange: AbstractExchange,
        *,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._channel = channel
        self._queue = queue
        self._dead_letter_exchange = dead_letter_exchange
        self._loop = loop
        self._receivers: list[RabbitMQReceiver] = []
        self._closing = False
        channel.close_callbacks.add(self._on_channel_closed)

    async def create_receiver(self, mode: ReceiveMode) -> RabbitMQReceiver:
        if self._closing:
            raise RuntimeError("queue client is closed")
        receiver = RabbitMQReceiver(
            self._channel,
            self._queue,
            mode=mode,
            dead_letter_exchange=self._dead_letter_exchange,
            dead_letter_routing_key=self._queue.name,
            loop=self._loop,
        )
        self._receivers.append(receiver)
        return receiver

    def connection_lost(self, error: BaseException) -> None:
        for receiver in self._receivers:
            receiver.report_error(error)

    def _on_channel_closed(self, *args: Any, **kwargs: Any) -> None:
        if self._closing:
            return
        _log("channel_closed_unexpectedly", queue=self._queue.name)
        self.connection_lost(_close_reason(args, "channel"))

    async def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        self._receivers.clear()
        if not self._channel.is_closed:
            await self._channel.close()


class RabbitMQNamespace:
    """Namespace implementation wrapping a single AMQP connection."""

    def __init__(
        self,
        connection: AbstractConnection,
        *,
        prefetch_count: int,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._connection = connection
        self._prefetch_count = prefetch_count
        self._loop = loop
        self._queue_clients: list[RabbitMQQueueClient] = []
        self._closing = False
        connection.close_callbacks.add(self._on_connection_closed)

    async def create_queue_client(self, queue_name: str) -> RabbitMQQueueClient:
        if self._closing:
            raise RuntimeError("namespace is closed")
        channel = await self._connection.channel()
        await channel.set_qos(prefetch_count=self._prefetch_count)
        queue = await channel.declare_queue(queue_name, durable=True)
        dead_letter_exchange = await channel.declare_exchange(
            dead_letter_name(queue_name),
            aio_pika.ExchangeType.DIRECT,
            durable=True,
        )
        dead_letter_queue = await channel.declare_queue(dead_letter_name(queue_name), durable=True)
        await dead_letter_queue.bind(dead_letter_exchange, routing_key=queue_name)
        _log("queue_declared", queue=queue_name, dead_letter_queue=dead_letter_name(queue_name))

        client = RabbitMQQueueClient(channel, queue, dead_letter_exchange, loop=self._loop)
        self._queue_clients.append(client)
        return client

    def _on_connection_closed(self, *args: Any, **kwargs: Any) -> None:
        if self._closing:
            return
        _log("broker_disconnect_detected")
        error = _close_reason(args, "connection")
        for client in self._queue_clients:
            client.connection_lost(error)

    async def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        self._queue_clients.clear()
        if not self._connection.is_closed:
            await self._connection.close()


class RabbitMQTransport:
    """QueueTransport implementation over aio_pika."""

    def __init__(self, *, prefetch_count: int) -> None:
        self._prefetch_count = prefetch_count

    async def open_namespace(self, connection_string: str) -> RabbitMQNamespace:
        _log("rmq_connecting")
        connection = await aio_pika.connect(connection_string)
        _log("rmq_connected")
        return RabbitMQNamespace(
            connection,
            prefetch_count=self._prefetch_count,
            loop=asyncio.get_running_loop(),
        )
