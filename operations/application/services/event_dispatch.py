"""Event dispatch: handler registry and the context handlers run with.

Handlers are keyed by (object_type, type). The registry is filled once at
startup; `ensure_complete` fails fast when an expected pair has no handler.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from operations.application.interfaces.repositories import (
    IDocumentRecordRepository,
    IEventRepository,
    IRequirementRuleRepository,
    IWorkflowDefinitionRepository,
    IWorkflowRepository,
)
from operations.application.interfaces.services import (
    IDocumentStore,
    IEventHandler,
    IEventPublisher,
)
from operations.application.services.document_status_machine import DocumentStatusMachine
from operations.application.services.requirement_resolver import RequirementResolver
from operations.application.services.workflow_engine_registry import WorkflowEngineRegistry
from operations.domain.enums import EventType, ObjectType
from operations.domain.exceptions import MissingEventHandlerException, ValidationException

type HandlerKey = tuple[ObjectType, EventType]


@dataclass(frozen=True)
class HandlerContext:
    """Collaborators bound to the transaction a handler runs in.

    Everything a handler writes through these commits together with the
    event's PROCESSED mark, or not at all.
    """

    now: datetime
    events: IEventRepository
    publisher: IEventPublisher
    workflows: IWorkflowRepository
    definitions: IWorkflowDefinitionRepository
    rules: IRequirementRuleRepository
    workflow_documents: IDocumentRecordRepository
    process_documents: IDocumentRecordRepository
    resolver: RequirementResolver
    status_machine: DocumentStatusMachine
    engines: WorkflowEngineRegistry
    document_store: IDocumentStore | None = None


class HandlerRegistry:
    """Maps (object_type, type) to the handler for that event."""

    def __init__(self) -> None:
        self._handlers: dict[HandlerKey, IEventHandler] = {}

    def register(
        self, object_type: ObjectType, event_type: EventType, handler: IEventHandler
    ) -> None:
        key = (object_type, event_type)
        if key in self._handlers:
            raise ValidationException(
                f"Handler already registered for {object_type.value}/{event_type.value}",
                field="event_type",
            )
        self._handlers[key] = handler

    def get(self, key: HandlerKey) -> IEventHandler | None:
        return self._handlers.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def ensure_complete(self, expected: Iterable[HandlerKey]) -> None:
        """Raise MissingEventHandlerException if any expected pair is unregistered."""
        missing = [
            (object_type.value, event_type.value)
            for object_type, event_type in expected
            if (object_type, event_type) not in self._handlers
        ]
        if missing:
            raise MissingEventHandlerException(missing)
