"""Composition root for event workers: wires claimer, processor and handlers from Settings."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from operations.application.interfaces.services import IDocumentStore
from operations.application.services.document_status_machine import DocumentStatusMachine
from operations.application.services.event_dispatch import HandlerRegistry
from operations.application.services.workflow_engine_registry import WorkflowEngineRegistry
from operations.application.use_cases.events.event_handlers import (
    REQUIRED_HANDLER_KEYS,
    build_handler_registry,
)
from operations.core.config import Settings
from operations.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowDefinitionRepository,
)
from operations.infrastructure.services.event_claimer import EventClaimer
from operations.infrastructure.services.event_processor import EventProcessor
from operations.infrastructure.services.event_worker import EventWorker
from operations.infrastructure.services.handler_context import HandlerContextFactory
from operations.infrastructure.workflow_engines import build_workflow_engine_registry
from operations.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


async def validate_startup(
    session_factory: async_sessionmaker[AsyncSession],
    engines: WorkflowEngineRegistry,
    handlers: HandlerRegistry,
) -> None:
    """Fail fast on missing handlers or definitions that name unknown engines."""
    handlers.ensure_complete(REQUIRED_HANDLER_KEYS)
    async with session_factory() as session:
        engine_ids = await WorkflowDefinitionRepository(session).list_engine_ids()
    engines.validate(engine_ids)
    logger.info(
        "Startup checks passed: %d handler(s), engines %s",
        len(handlers),
        ", ".join(sorted(engines.engine_ids)),
    )


def build_event_worker(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    engines: WorkflowEngineRegistry | None = None,
    handlers: HandlerRegistry | None = None,
    document_store: IDocumentStore | None = None,
) -> EventWorker:
    """Wire an EventWorker; engines and handlers default to the built-in ones."""
    if engines is None:
        engines = build_workflow_engine_registry()
    if handlers is None:
        handlers = build_handler_registry()
    context_factory = HandlerContextFactory(
        engines=engines,
        status_machine=DocumentStatusMachine(
            resubmission_allowed=settings.document_resubmission_allowed
        ),
        document_store=document_store,
    )
    processor = EventProcessor(
        session_factory=session_factory,
        handlers=handlers,
        context_factory=context_factory,
        max_processing_attempts=settings.max_processing_attempts,
    )
    return EventWorker.from_settings(settings, EventClaimer(session_factory), processor)
