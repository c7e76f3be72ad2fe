"""Run an event worker: claim queued events and dispatch them to handlers.

Usage:
    python -m scripts.run_event_worker
Stops after the current batch on SIGINT/SIGTERM. Exits non-zero when startup
checks fail or storage stays unavailable for too many consecutive claims.
"""

import asyncio
import signal
import sys

import operations.infrastructure.persistence.database as database
from operations.application.use_cases.events.event_handlers import build_handler_registry
from operations.core.config import get_settings
from operations.domain.exceptions import OperationsException
from operations.infrastructure.services import build_event_worker, validate_startup
from operations.infrastructure.workflow_engines import build_workflow_engine_registry
from operations.shared.telemetry.logging import get_logger, setup_logging
from operations.shared.telemetry.telemetry import configure_telemetry_from_settings

logger = get_logger("operations.worker")


async def main() -> int:
    """Validate startup, then run the worker until signalled."""
    setup_logging()
    settings = get_settings()
    session_factory = database.get_session_factory()
    telemetry = configure_telemetry_from_settings()
    if telemetry is not None:
        telemetry.instrument_logging()
        telemetry.instrument_sqlalchemy(database.engine)

    engines = build_workflow_engine_registry()
    handlers = build_handler_registry()
    try:
        await validate_startup(session_factory, engines, handlers)
    except OperationsException as e:
        print(f"Startup check failed: {e.message}", file=sys.stderr)
        return 1

    worker = build_event_worker(settings, session_factory, engines, handlers)
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)

    try:
        await worker.run()
    except OperationsException as e:
        logger.error("Event worker %s exiting: %s", worker.worker_id, e.message)
        return 2
    finally:
        if telemetry is not None:
            telemetry.shutdown()
        await database.engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
