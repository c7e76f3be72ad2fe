"""Document operations: request, provide, verify, reject, waive and resubmit.

Each operation applies the status machine to a workflow or process document,
saves the result and publishes the matching event in the caller's
transaction. Nothing here commits.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from operations.domain.entities.document import DocumentRecord
from operations.domain.enums import (
    PROCESS_DOCUMENT_EVENTS,
    WORKFLOW_DOCUMENT_EVENTS,
    DocumentStatus,
    ObjectType,
)
from operations.domain.exceptions import ResourceNotFoundException, ValidationException
from operations.shared.telemetry.logging import get_logger
from operations.shared.utils.datetime import utc_now
from operations.shared.utils.generators import generate_cuid

if TYPE_CHECKING:
    from operations.application.interfaces.repositories import (
        IDocumentRecordRepository,
        IWorkflowRepository,
    )
    from operations.application.interfaces.services import IDocumentStore, IEventPublisher
    from operations.application.services.document_status_machine import (
        DocumentStatusMachine,
    )
    from operations.application.services.event_dispatch import HandlerContext

logger = get_logger(__name__)


class DocumentOperations:
    """Document lifecycle operations for workflows and processes.

    owner_type selects the table: ObjectType.WORKFLOW for workflow documents,
    ObjectType.PROCESS for process documents.
    """

    def __init__(
        self,
        workflow_documents: IDocumentRecordRepository,
        process_documents: IDocumentRecordRepository,
        workflows: IWorkflowRepository,
        publisher: IEventPublisher,
        status_machine: DocumentStatusMachine,
        document_store: IDocumentStore | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._workflow_documents = workflow_documents
        self._process_documents = process_documents
        self._workflows = workflows
        self._publisher = publisher
        self._status_machine = status_machine
        self._document_store = document_store
        self._clock = clock

    @classmethod
    def from_context(cls, context: HandlerContext) -> DocumentOperations:
        """Operations bound to a handler's transaction and clock."""
        return cls(
            workflow_documents=context.workflow_documents,
            process_documents=context.process_documents,
            workflows=context.workflows,
            publisher=context.publisher,
            status_machine=context.status_machine,
            document_store=context.document_store,
            clock=lambda: context.now,
        )

    def _repo(self, owner_type: ObjectType) -> IDocumentRecordRepository:
        if owner_type is ObjectType.WORKFLOW:
            return self._workflow_documents
        if owner_type is ObjectType.PROCESS:
            return self._process_documents
        raise ValidationException(
            f"Documents belong to a workflow or process, not {owner_type.value}",
            field="owner_type",
        )

    async def _publish(self, record: DocumentRecord, actor: str, now: datetime) -> None:
        events = (
            PROCESS_DOCUMENT_EVENTS
            if record.owner_type is ObjectType.PROCESS
            else WORKFLOW_DOCUMENT_EVENTS
        )
        await self._publisher.publish(
            tenant_id=record.tenant_id,
            event_type=events[record.status],
            object_type=record.object_type,
            object_id=record.id,
            actor=actor,
            occurred=now,
        )

    async def _request(
        self,
        owner_type: ObjectType,
        tenant_id: str,
        owner_id: str,
        document_definition_id: str,
        actor: str,
    ) -> DocumentRecord:
        if not document_definition_id:
            raise ValidationException(
                "document_definition_id is required", field="document_definition_id"
            )
        now = self._clock()
        record = DocumentRecord(
            id=generate_cuid(),
            tenant_id=tenant_id,
            owner_type=owner_type,
            owner_id=owner_id,
            document_definition_id=document_definition_id,
            status=DocumentStatus.REQUESTED,
            requested=now,
            requested_by=actor,
        )
        created = await self._repo(owner_type).add(record)
        await self._publish(created, actor, now)
        logger.info(
            "Requested document %s for %s %s (record %s)",
            document_definition_id,
            owner_type.value,
            owner_id,
            created.id,
        )
        return created

    async def request_workflow_document(
        self, tenant_id: str, workflow_id: str, document_definition_id: str, actor: str
    ) -> DocumentRecord:
        """Create a REQUESTED workflow document and publish workflow_document_requested."""
        workflow = await self._workflows.get_by_id(workflow_id, tenant_id)
        if workflow is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        return await self._request(
            ObjectType.WORKFLOW, tenant_id, workflow_id, document_definition_id, actor
        )

    async def request_process_document(
        self, tenant_id: str, process_id: str, document_definition_id: str, actor: str
    ) -> DocumentRecord:
        """Create a REQUESTED process document and publish process_document_requested."""
        return await self._request(
            ObjectType.PROCESS, tenant_id, process_id, document_definition_id, actor
        )

    async def _transition(
        self,
        owner_type: ObjectType,
        tenant_id: str,
        record_id: str,
        actor: str,
        apply: Callable[[DocumentRecord, datetime], DocumentRecord],
    ) -> DocumentRecord:
        repo = self._repo(owner_type)
        record = await repo.get_by_id(record_id, tenant_id)
        if record is None:
            resource = (
                "process_document" if owner_type is ObjectType.PROCESS else "workflow_document"
            )
            raise ResourceNotFoundException(resource, record_id)
        now = self._clock()
        updated = apply(record, now)
        saved = await repo.save(updated, expected_status=record.status)
        await self._publish(saved, actor, now)
        logger.info(
            "Document record %s: %s -> %s by %s",
            saved.id,
            record.status.value,
            saved.status.value,
            actor,
        )
        return saved

    async def provide(
        self,
        owner_type: ObjectType,
        tenant_id: str,
        record_id: str,
        document_id: str,
        actor: str,
    ) -> DocumentRecord:
        """REQUESTED -> PROVIDED. Checks the document store when one is configured."""
        if (
            document_id
            and self._document_store is not None
            and not await self._document_store.exists(tenant_id, document_id)
        ):
            raise ResourceNotFoundException("document", document_id)
        return await self._transition(
            owner_type,
            tenant_id,
            record_id,
            actor,
            lambda r, now: self._status_machine.provide(r, document_id, actor, now),
        )

    async def verify(
        self, owner_type: ObjectType, tenant_id: str, record_id: str, actor: str
    ) -> DocumentRecord:
        """PROVIDED -> VERIFIED."""
        return await self._transition(
            owner_type,
            tenant_id,
            record_id,
            actor,
            lambda r, now: self._status_machine.verify(r, actor, now),
        )

    async def reject(
        self,
        owner_type: ObjectType,
        tenant_id: str,
        record_id: str,
        actor: str,
        reason: str,
    ) -> DocumentRecord:
        """PROVIDED -> REJECTED with a reason."""
        return await self._transition(
            owner_type,
            tenant_id,
            record_id,
            actor,
            lambda r, now: self._status_machine.reject(r, actor, now, reason),
        )

    async def waive(
        self,
        owner_type: ObjectType,
        tenant_id: str,
        record_id: str,
        actor: str,
        reason: str,
    ) -> DocumentRecord:
        """REQUESTED or PROVIDED -> WAIVED with a reason."""
        return await self._transition(
            owner_type,
            tenant_id,
            record_id,
            actor,
            lambda r, now: self._status_machine.waive(r, actor, now, reason),
        )

    async def resubmit(
        self, owner_type: ObjectType, tenant_id: str, record_id: str, actor: str
    ) -> DocumentRecord:
        """REJECTED -> REQUESTED, when the resubmission policy allows it."""
        return await self._transition(
            owner_type,
            tenant_id,
            record_id,
            actor,
            lambda r, now: self._status_machine.resubmit(r, actor, now),
        )
