"""Event handlers for workflow and workflow document events.

Handlers run inside the processor's transaction and must be idempotent:
an event can be delivered more than once after a lost lease or a failed
commit. Both handlers lock the workflow row before recomputing
requirements so concurrent events for one workflow serialize.
"""

from __future__ import annotations

from operations.application.dtos.requirements import RequirementResolution
from operations.application.interfaces.services import IWorkflowEngine
from operations.application.services.event_dispatch import HandlerContext, HandlerRegistry
from operations.application.use_cases.documents.document_operations import (
    DocumentOperations,
)
from operations.domain.entities.event import EventEntity
from operations.domain.entities.workflow import WorkflowEntity
from operations.domain.enums import (
    WORKFLOW_DOCUMENT_EVENTS,
    EventType,
    ObjectType,
    WorkflowStatus,
)
from operations.domain.exceptions import ResourceNotFoundException
from operations.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_CLOSED_WORKFLOW_STATUSES = frozenset({WorkflowStatus.COMPLETED, WorkflowStatus.CANCELLED})

WORKFLOW_HANDLER_KEYS: tuple[tuple[ObjectType, EventType], ...] = (
    (ObjectType.WORKFLOW, EventType.WORKFLOW_CREATED),
    (ObjectType.WORKFLOW, EventType.WORKFLOW_STATUS_CHANGED),
)
WORKFLOW_DOCUMENT_HANDLER_KEYS: tuple[tuple[ObjectType, EventType], ...] = tuple(
    (ObjectType.WORKFLOW_DOCUMENT, event_type)
    for event_type in WORKFLOW_DOCUMENT_EVENTS.values()
)
# Every pair a worker must be able to handle; checked at startup.
REQUIRED_HANDLER_KEYS = WORKFLOW_HANDLER_KEYS + WORKFLOW_DOCUMENT_HANDLER_KEYS


async def _lock_workflow(context: HandlerContext, workflow_id: str) -> WorkflowEntity:
    workflow = await context.workflows.get_for_update(workflow_id)
    if workflow is None:
        raise ResourceNotFoundException("workflow", workflow_id)
    return workflow


async def _engine_for(context: HandlerContext, workflow: WorkflowEntity) -> IWorkflowEngine:
    definition = await context.definitions.get(
        workflow.definition_id, workflow.definition_version
    )
    if definition is None:
        raise ResourceNotFoundException(
            "workflow_definition",
            f"{workflow.definition_id}:{workflow.definition_version}",
        )
    return context.engines.get(definition.engine_id)


async def _request_missing_documents(
    context: HandlerContext,
    workflow: WorkflowEntity,
    event: EventEntity,
    only: str | None = None,
) -> int:
    """Request required documents that have no live (non-rejected) record.

    `only` limits the requests to one document definition. Returns the
    number of documents requested.
    """
    rules = await context.rules.get_rules(
        workflow.definition_id, workflow.definition_version
    )
    live = {
        d.document_definition_id
        for d in await context.workflow_documents.list_for_owner(workflow.id)
        if d.is_live
    }
    operations = DocumentOperations.from_context(context)
    requested = 0
    for rule in rules:
        if not rule.required or rule.document_definition_id in live:
            continue
        if only is not None and rule.document_definition_id != only:
            continue
        await operations.request_workflow_document(
            workflow.tenant_id, workflow.id, rule.document_definition_id, event.actor
        )
        requested += 1
    return requested


async def _recompute(
    context: HandlerContext,
    workflow: WorkflowEntity,
    engine: IWorkflowEngine,
    event: EventEntity,
) -> RequirementResolution:
    resolution = await context.resolver.resolve(
        workflow.definition_id,
        workflow.definition_version,
        workflow.id,
        now=context.now,
    )
    await engine.requirements_changed(workflow, resolution, event)
    return resolution


class RequestOutstandingDocumentsHandler:
    """Workflow created / status changed: request required documents with no live record.

    On creation the workflow is also started on its engine. Re-running is
    harmless: documents already requested are skipped.
    """

    async def handle(self, event: EventEntity, context: HandlerContext) -> None:
        workflow = await _lock_workflow(context, event.object_id)
        engine = await _engine_for(context, workflow)

        if event.type is EventType.WORKFLOW_CREATED and workflow.engine_instance_id is None:
            instance_id = await engine.start_workflow(workflow, event)
            if instance_id:
                await context.workflows.set_engine_instance(workflow.id, instance_id)

        if workflow.status in _CLOSED_WORKFLOW_STATUSES:
            logger.debug(
                "Workflow %s is %s; not requesting documents",
                workflow.id,
                workflow.status.value,
            )
            return

        requested = await _request_missing_documents(context, workflow, event)
        if requested:
            logger.info(
                "Requested %d outstanding document(s) for workflow %s", requested, workflow.id
            )

        await _recompute(context, workflow, engine, event)


class WorkflowDocumentEventHandler:
    """Workflow document changed: recompute requirements and notify the engine.

    When resubmission is not allowed, a rejected required document is
    replaced by a fresh request on an open workflow.
    """

    async def handle(self, event: EventEntity, context: HandlerContext) -> None:
        record = await context.workflow_documents.get_by_id(event.object_id)
        if record is None:
            raise ResourceNotFoundException("workflow_document", event.object_id)
        workflow = await _lock_workflow(context, record.owner_id)
        engine = await _engine_for(context, workflow)
        if (
            event.type is EventType.WORKFLOW_DOCUMENT_REJECTED
            and not context.status_machine.resubmission_allowed
            and workflow.status not in _CLOSED_WORKFLOW_STATUSES
        ):
            if await _request_missing_documents(
                context, workflow, event, only=record.document_definition_id
            ):
                logger.info(
                    "Requested a replacement for rejected document %s (%s) on workflow %s",
                    record.id,
                    record.document_definition_id,
                    workflow.id,
                )
        resolution = await _recompute(context, workflow, engine, event)
        logger.debug(
            "Workflow %s requirements after %s: %d outstanding, %d conflict(s)",
            workflow.id,
            event.type.value,
            len(resolution.outstanding),
            len(resolution.conflicts),
        )


def build_handler_registry() -> HandlerRegistry:
    """Registry with a handler for every REQUIRED_HANDLER_KEYS pair."""
    registry = HandlerRegistry()
    workflow_handler = RequestOutstandingDocumentsHandler()
    for object_type, event_type in WORKFLOW_HANDLER_KEYS:
        registry.register(object_type, event_type, workflow_handler)
    document_handler = WorkflowDocumentEventHandler()
    for object_type, event_type in WORKFLOW_DOCUMENT_HANDLER_KEYS:
        registry.register(object_type, event_type, document_handler)
    return registry
