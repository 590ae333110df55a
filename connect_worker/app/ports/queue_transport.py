"""Port: queue transport (namespace -> queue client -> receiver). Implementations live in infrastructure.

The supervisor only ever talks to these protocols; a session is the triple of
namespace, queue client and receiver it opened last.
"""
from __future__ import annotations

from enum import Enum
from typing import Protocol

from connect_worker.app.ports.incoming_message import IncomingMessage


class ReceiveMode(str, Enum):
    # Message stays locked until complete()/dead_letter() or the transport releases it.
    PEEK_LOCK = "PEEK_LOCK"


class MessageHandler(Protocol):
    """Callbacks a receiver drives for each delivery and for each delivery/connection failure."""

    async def on_message(self, message: IncomingMessage) -> None: ...

    async def on_error(self, error: BaseException) -> None: ...


class Receiver(Protocol):
    async def register_handler(self, handler: MessageHandler, *, auto_complete: bool) -> None:
        """Start delivering messages to handler.on_message; failures go to handler.on_error."""
        ...

    async def close(self) -> None: ...


class QueueClient(Protocol):
    async def create_receiver(self, mode: ReceiveMode) -> Receiver: ...

    async def close(self) -> None: ...


class Namespace(Protocol):
    async def create_queue_client(self, queue_name: str) -> QueueClient: ...

    async def close(self) -> None: ...


class QueueTransport(Protocol):
    async def open_namespace(self, connection_string: str) -> Namespace: ...
