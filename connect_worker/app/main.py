import asyncio
import signal
import sys

from loguru import logger

from connect_worker.app.composition import create_worker_dependencies
from connect_worker.app.config.settings import Settings
from connect_worker.app.core import SERVICE_NAME
from connect_worker.app.core.logging import configure_logging


def _log(event: str, **kwargs) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


async def run_worker(settings: Settings) -> None:
    dependencies = create_worker_dependencies(settings)
    worker_task = asyncio.current_task()

    def request_shutdown() -> None:
        _log("shutdown_signal")
        if worker_task is not None:
            worker_task.cancel()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown)
        except NotImplementedError:
            pass

    _log("worker_started")
    try:
        await dependencies.listener.run_forever()
    except asyncio.CancelledError:
        _log("worker_cancelled")
    finally:
        await dependencies.close()
        _log("worker_stopped")


def main() -> None:
    settings = Settings()
    configure_logging(settings)
    try:
        asyncio.run(run_worker(settings))
    except KeyboardInterrupt:
        _log("worker_interrupted")
    except Exception as e:
        logger.exception("worker failed: {}", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
