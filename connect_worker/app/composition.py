"""Worker composition root: build and lifecycle-manage concrete dependencies.

Composition may: import concrete classes, call factories, store interface types,
manage high-level lifecycle.
"""
from __future__ import annotations

from typing import Any

from loguru import logger

from connect_worker.app.application.credential_gate import CredentialGate
from connect_worker.app.application.dispatcher import NotificationDispatcher
from connect_worker.app.application.listener import ListenerLoop
from connect_worker.app.application.restart_signal import RestartSignal
from connect_worker.app.application.supervisor import ConnectionSupervisor
from connect_worker.app.config.settings import Settings
from connect_worker.app.core import SERVICE_NAME
from connect_worker.app.infrastructure.auth.factory import create_credential_provider
from connect_worker.app.infrastructure.http.factory import create_http_client
from connect_worker.app.infrastructure.messaging.factory import create_queue_transport
from connect_worker.app.infrastructure.notifications.factory import create_notification_processor
from connect_worker.app.ports.http_client import AbstractHttpClient


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class WorkerDependencies:
    """Holds wired worker dependencies and their lifecycle."""

    def __init__(self, *, settings: Settings) -> None:
        self._settings = settings
        self._http_client: AbstractHttpClient | None = None
        self._supervisor: ConnectionSupervisor | None = None
        self._listener: ListenerLoop | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def supervisor(self) -> ConnectionSupervisor:
        if self._supervisor is None:
            raise RuntimeError("supervisor is not initialized")
        return self._supervisor

    @property
    def listener(self) -> ListenerLoop:
        if self._listener is None:
            raise RuntimeError("listener is not initialized")
        return self._listener

    def build(self) -> None:
        settings = self._settings
        self._http_client = create_http_client(settings)

        gate = CredentialGate(
            create_credential_provider(settings, self._http_client),
            client_id=settings.client_id,
            auth_server=settings.auth_server,
            consent_redirect_uri=settings.oauth_consent_redirect_uri,
        )
        dispatcher = NotificationDispatcher(
            create_notification_processor(settings, self._http_client),
            debug=settings.debug,
        )
        restart_signal = RestartSignal()
        self._supervisor = ConnectionSupervisor(
            create_queue_transport(settings),
            dispatcher,
            restart_signal,
            connection_string=settings.broker_connection_string,
            queue_name=settings.queue_name,
            start_failure_delay_seconds=settings.start_failure_delay_seconds,
        )
        self._listener = ListenerLoop(
            gate,
            self._supervisor,
            restart_signal,
            readiness_failure_exit_code=settings.readiness_failure_exit_code,
            poll_interval_seconds=settings.poll_interval_seconds,
            settle_delay_seconds=settings.settle_delay_seconds,
        )
        _log("worker_dependencies_built", queue=settings.queue_name, backend=settings.consumer_backend)

    async def close(self) -> None:
        if self._supervisor is not None:
            try:
                await self._supervisor.close()
            except Exception as exc:
                logger.warning("supervisor close failed: {}", exc)

        if self._http_client is not None:
            try:
                await self._http_client.close()
            except Exception as exc:
                logger.warning("http client close failed: {}", exc)
            self._http_client = None

        self._supervisor = None
        self._listener = None


def create_worker_dependencies(settings: Settings | None = None) -> WorkerDependencies:
    dependencies = WorkerDependencies(settings=settings or Settings())
    dependencies.build()
    return dependencies
