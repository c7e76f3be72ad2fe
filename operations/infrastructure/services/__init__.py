"""Event queue services: claimer, processor, worker and their wiring."""

from operations.infrastructure.services.bootstrap import build_event_worker, validate_startup
from operations.infrastructure.services.event_claimer import EventClaimer
from operations.infrastructure.services.event_processor import EventProcessor
from operations.infrastructure.services.event_worker import BatchResult, EventWorker
from operations.infrastructure.services.handler_context import HandlerContextFactory

__all__ = [
    "BatchResult",
    "EventClaimer",
    "EventProcessor",
    "EventWorker",
    "HandlerContextFactory",
    "build_event_worker",
    "validate_startup",
]
