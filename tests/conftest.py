from __future__ import annotations

import pytest

from connect_worker.app.application.dispatcher import NotificationDispatcher
from connect_worker.app.application.restart_signal import RestartSignal
from connect_worker.app.application.supervisor import ConnectionSupervisor
from tests.fakes import (
    CONNECTION_STRING,
    QUEUE_NAME,
    FakeTransport,
    RecordingProcessor,
    RecordingSleep,
)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def restart_signal() -> RestartSignal:
    return RestartSignal(requested=False)


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def processor() -> RecordingProcessor:
    return RecordingProcessor()


@pytest.fixture()
def supervisor(
    transport: FakeTransport,
    restart_signal: RestartSignal,
    sleep: RecordingSleep,
    processor: RecordingProcessor,
) -> ConnectionSupervisor:
    return ConnectionSupervisor(
        transport,
        NotificationDispatcher(processor),
        restart_signal,
        connection_string=CONNECTION_STRING,
        queue_name=QUEUE_NAME,
        start_failure_delay_seconds=5.0,
        sleep=sleep,
    )
