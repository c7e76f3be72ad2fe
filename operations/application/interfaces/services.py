"""Service interfaces (ports) for the application layer.

Protocols define contracts for workflow engines, event handlers, the
event publisher and the document store (DIP).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from operations.application.dtos.requirements import RequirementResolution
    from operations.application.services.event_dispatch import HandlerContext
    from operations.domain.entities import EventEntity, WorkflowEntity
    from operations.domain.enums import EventType, ObjectType


# Workflow engine interface
class IWorkflowEngine(Protocol):
    """Protocol for a workflow engine implementation, registered under engine_id.

    Notifications are delivered at-least-once; implementations de-duplicate
    by event id.
    """

    engine_id: str

    async def start_workflow(self, workflow: WorkflowEntity, event: EventEntity) -> str | None:
        """Start the engine-side instance. Return its id, or None if the engine keeps none."""

    async def requirements_changed(
        self,
        workflow: WorkflowEntity,
        resolution: RequirementResolution,
        event: EventEntity,
    ) -> None:
        """Notify the engine that the workflow's document requirements were recomputed."""


# Event handler interface
class IEventHandler(Protocol):
    """Protocol for an event handler. Handlers must be idempotent (at-least-once delivery)."""

    async def handle(self, event: EventEntity, context: HandlerContext) -> None:
        """Apply the event's side effects inside the context's transaction."""


# Document store interface
class IDocumentStore(Protocol):
    """Protocol for the external store holding document content."""

    async def exists(self, tenant_id: str, document_id: str) -> bool:
        """Return whether the document exists in the store."""


# Event publisher interface
class IEventPublisher(Protocol):
    """Protocol for appending queued events in the caller's transaction."""

    async def publish(
        self,
        tenant_id: str,
        event_type: EventType,
        object_type: ObjectType,
        object_id: str,
        actor: str,
        occurred: datetime | None = None,
        event_id: str | None = None,
    ) -> EventEntity:
        """Append a QUEUED event and return it."""
