"""Workflow/process document repositories. Return domain DocumentRecord values."""

from typing import Any

from sqlalchemy import asc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from operations.domain.entities.document import DocumentRecord
from operations.domain.enums import DocumentStatus, ObjectType
from operations.domain.exceptions import (
    InvalidTransitionException,
    ResourceNotFoundException,
)
from operations.infrastructure.persistence.models.document import (
    ProcessDocument,
    WorkflowDocument,
)
from operations.infrastructure.persistence.repositories.base import BaseRepository
from operations.shared.utils.datetime import ensure_utc

# Lifecycle columns copied verbatim between DocumentRecord and the ORM row.
_LIFECYCLE_FIELDS = (
    "document_id",
    "provided",
    "provided_by",
    "verified",
    "verified_by",
    "rejected",
    "rejected_by",
    "rejection_reason",
    "waived",
    "waived_by",
    "waive_reason",
)
_TIMESTAMP_FIELDS = frozenset({"provided", "verified", "rejected", "waived"})


class _DocumentRepository[ModelType: (WorkflowDocument, ProcessDocument)](
    BaseRepository[ModelType]
):
    """Shared mapping for the two document tables; subclasses name the owner column."""

    owner_type: ObjectType
    owner_column: str

    def _to_record(self, row: Any) -> DocumentRecord:
        values: dict[str, Any] = {}
        for name in _LIFECYCLE_FIELDS:
            value = getattr(row, name)
            if name in _TIMESTAMP_FIELDS and value is not None:
                value = ensure_utc(value)
            values[name] = value
        return DocumentRecord(
            id=row.id,
            tenant_id=row.tenant_id,
            owner_type=self.owner_type,
            owner_id=getattr(row, self.owner_column),
            document_definition_id=row.document_definition_id,
            status=DocumentStatus(row.status),
            requested=ensure_utc(row.requested),
            requested_by=row.requested_by,
            **values,
        )

    async def get_by_id(
        self, record_id: str, tenant_id: str | None = None
    ) -> DocumentRecord | None:
        model: Any = self.model
        q = select(self.model).where(model.id == record_id)
        if tenant_id is not None:
            q = q.where(model.tenant_id == tenant_id)
        result = await self.db.execute(q.execution_options(populate_existing=True))
        row = result.scalar_one_or_none()
        return self._to_record(row) if row else None

    async def list_for_owner(self, owner_id: str) -> list[DocumentRecord]:
        """All documents of one workflow/process, oldest request first."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model)
            .where(getattr(model, self.owner_column) == owner_id)
            .order_by(asc(model.requested), asc(model.id))
            .execution_options(populate_existing=True)
        )
        return [self._to_record(r) for r in result.scalars().all()]

    async def add(self, record: DocumentRecord) -> DocumentRecord:
        """Insert a new document record."""
        row = self.model(
            id=record.id,
            tenant_id=record.tenant_id,
            document_definition_id=record.document_definition_id,
            status=record.status.value,
            requested=record.requested,
            requested_by=record.requested_by,
            **{self.owner_column: record.owner_id},
            **{name: getattr(record, name) for name in _LIFECYCLE_FIELDS},
        )
        created = await self._insert(row)
        return self._to_record(created)

    async def save(
        self, record: DocumentRecord, expected_status: DocumentStatus
    ) -> DocumentRecord:
        """Write a transitioned record while the row is still in expected_status.

        A concurrent transition that committed first leaves the row in another
        status; the write then matches nothing and InvalidTransitionException
        is raised with the status actually stored.
        """
        model: Any = self.model
        result = await self.db.execute(
            update(self.model)
            .where(model.id == record.id, model.status == expected_status.value)
            .values(
                status=record.status.value,
                requested=record.requested,
                requested_by=record.requested_by,
                **{name: getattr(record, name) for name in _LIFECYCLE_FIELDS},
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return record
        current = await self.get_by_id(record.id)
        if current is None:
            raise ResourceNotFoundException(record.object_type.value, record.id)
        raise InvalidTransitionException(
            current.status.value, record.status.value, "document changed concurrently"
        )


class WorkflowDocumentRepository(_DocumentRepository[WorkflowDocument]):
    """Documents attached to workflows."""

    owner_type = ObjectType.WORKFLOW
    owner_column = "workflow_id"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowDocument)


class ProcessDocumentRepository(_DocumentRepository[ProcessDocument]):
    """Documents attached to processes."""

    owner_type = ObjectType.PROCESS
    owner_column = "process_id"

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ProcessDocument)
