"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from operations.domain.entities import (
        DocumentRecord,
        DocumentRequirementRule,
        EventEntity,
        WorkflowDefinitionEntity,
        WorkflowEntity,
    )
    from operations.domain.enums import DocumentStatus, ObjectType


# Event repository interface
class IEventRepository(Protocol):
    """Protocol for event queue storage (DIP)."""

    async def add(self, event: EventEntity) -> EventEntity:
        """Insert a new event."""

    async def exists(self, event_id: str) -> bool:
        """Return whether an event with this id exists."""

    async def get_by_id(
        self, event_id: str, tenant_id: str | None = None
    ) -> EventEntity | None:
        """Return event by id, optionally scoped to tenant."""

    async def list_for_object(
        self,
        tenant_id: str,
        object_type: ObjectType,
        object_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[EventEntity]:
        """Return events for one object, oldest first."""

    async def list_failed(
        self, tenant_id: str, skip: int = 0, limit: int = 100
    ) -> list[EventEntity]:
        """Return dead-lettered events for tenant."""

    async def count_by_status(self, tenant_id: str) -> dict[str, int]:
        """Return event counts per status for tenant."""

    async def claim_candidates(
        self, stale_before: datetime, limit: int
    ) -> list[EventEntity]:
        """Return claimable events in occurred order."""

    async def try_lock(
        self, event_id: str, lock_name: str, now: datetime, stale_before: datetime
    ) -> bool:
        """Compare-and-swap the lease onto one event."""

    async def apply_transition(
        self, event: EventEntity, lock_name: str, locked: datetime
    ) -> bool:
        """Write a post-processing state while the lease taken at `locked` is still held."""

    async def reset_locks(self, lock_name: str) -> int:
        """Release leases held under lock_name on queued events."""


# Document repository interface (workflow and process documents)
class IDocumentRecordRepository(Protocol):
    """Protocol for workflow/process document storage (DIP)."""

    async def get_by_id(
        self, record_id: str, tenant_id: str | None = None
    ) -> DocumentRecord | None:
        """Return document record by id, optionally scoped to tenant."""

    async def list_for_owner(self, owner_id: str) -> list[DocumentRecord]:
        """Return all documents of a workflow or process."""

    async def add(self, record: DocumentRecord) -> DocumentRecord:
        """Insert a new document record."""

    async def save(
        self, record: DocumentRecord, expected_status: DocumentStatus
    ) -> DocumentRecord:
        """Overwrite a document record still in expected_status; InvalidTransitionException otherwise."""


# Requirement rule repository interface
class IRequirementRuleRepository(Protocol):
    """Protocol for document requirement rules per workflow definition version (DIP)."""

    async def get_rules(
        self, workflow_definition_id: str, workflow_definition_version: int
    ) -> list[DocumentRequirementRule]:
        """Return rules for the definition version ordered by document_definition_id."""


# Workflow repository interface
class IWorkflowRepository(Protocol):
    """Protocol for workflow instance storage (DIP)."""

    async def get_by_id(
        self, workflow_id: str, tenant_id: str | None = None
    ) -> WorkflowEntity | None:
        """Return workflow by id, optionally scoped to tenant."""

    async def get_for_update(self, workflow_id: str) -> WorkflowEntity | None:
        """Return workflow holding a row lock until the transaction ends."""

    async def set_engine_instance(self, workflow_id: str, engine_instance_id: str) -> None:
        """Record the engine-side instance id."""


# Workflow definition repository interface
class IWorkflowDefinitionRepository(Protocol):
    """Protocol for workflow definitions keyed by (id, version) (DIP)."""

    async def get(self, definition_id: str, version: int) -> WorkflowDefinitionEntity | None:
        """Return definition version, or None."""

    async def list_engine_ids(self) -> set[str]:
        """Return engine ids referenced by stored definitions."""
