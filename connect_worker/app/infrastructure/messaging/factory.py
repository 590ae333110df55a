"""Queue transport factory: selects implementation from config. Only place that imports concrete transports."""
from __future__ import annotations

from connect_worker.app.config.settings import Settings
from connect_worker.app.ports.queue_transport import QueueTransport
from connect_worker.app.infrastructure.messaging.rabbitmq.rabbitmq_transport import RabbitMQTransport


def create_queue_transport(settings: Settings) -> QueueTransport:
    backend = settings.consumer_backend.strip().lower()

    if backend == "rabbitmq":
        return RabbitMQTransport(prefetch_count=settings.prefetch_count)

    raise ValueError(f"Unsupported consumer backend: {backend}")
