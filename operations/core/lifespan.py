"""Application lifespan: startup and shutdown.

Only wiring of infrastructure (logging, telemetry, DB engine dispose);
no business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from operations.infrastructure.persistence import database
from operations.shared.telemetry.logging import setup_logging
from operations.shared.telemetry.telemetry import (
    configure_telemetry_from_settings,
    get_telemetry,
    set_telemetry,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, telemetry (if enabled). Shutdown: telemetry shutdown,
    SQL engine dispose.
    """
    # ---- Startup ----
    setup_logging()
    telemetry = configure_telemetry_from_settings()
    if telemetry is not None:
        telemetry.instrument_fastapi(app)
        telemetry.instrument_logging()
        database._ensure_engine()
        telemetry.instrument_sqlalchemy(database.engine)
        logger.info("Telemetry initialized")

    yield

    # ---- Shutdown ----
    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
        logger.info("Telemetry shutdown complete")

    if getattr(database, "engine", None) is not None:
        await database.engine.dispose()
        logger.info("Database engine disposed")
