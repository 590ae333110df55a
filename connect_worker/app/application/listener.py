"""Listener loop: the outermost scheduler polling the restart signal on a fixed interval."""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from loguru import logger

from connect_worker.app.application.credential_gate import CredentialGate, ensure_ready
from connect_worker.app.application.restart_signal import RestartSignal
from connect_worker.app.application.supervisor import ConnectionSupervisor
from connect_worker.app.core import SERVICE_NAME


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class ListenerLoop:
    def __init__(
        self,
        gate: CredentialGate,
        supervisor: ConnectionSupervisor,
        restart_signal: RestartSignal,
        *,
        readiness_failure_exit_code: int,
        poll_interval_seconds: float = 5.0,
        settle_delay_seconds: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._gate = gate
        self._supervisor = supervisor
        self._restart_signal = restart_signal
        self._readiness_failure_exit_code = readiness_failure_exit_code
        self._poll_interval_seconds = poll_interval_seconds
        self._settle_delay_seconds = settle_delay_seconds
        self._sleep = sleep

    async def step(self) -> bool:
        """One polling iteration. Returns True when a session start was attempted."""
        started = False
        if self._restart_signal.is_set:
            _log("queue_worker_starting")
            # Cleared before starting: a failed start or an error during the settle
            # delay requests again and is picked up on the next iteration.
            self._restart_signal.clear()
            await self._supervisor.start_session()
            await self._sleep(self._settle_delay_seconds)
            started = True
        await self._sleep(self._poll_interval_seconds)
        return started

    async def run_forever(self) -> None:
        await ensure_ready(self._gate, exit_code=self._readiness_failure_exit_code)
        while True:
            await self.step()
