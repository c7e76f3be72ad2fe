"""Builds HandlerContext values bound to one database session."""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from operations.application.interfaces.services import IDocumentStore
from operations.application.services.document_status_machine import DocumentStatusMachine
from operations.application.services.event_dispatch import HandlerContext
from operations.application.services.requirement_resolver import RequirementResolver
from operations.application.services.workflow_engine_registry import WorkflowEngineRegistry
from operations.application.use_cases.events.publish_event import PublishEventUseCase
from operations.infrastructure.persistence.repositories import (
    EventRepository,
    ProcessDocumentRepository,
    RequirementRuleRepository,
    WorkflowDefinitionRepository,
    WorkflowDocumentRepository,
    WorkflowRepository,
)


class HandlerContextFactory:
    """Creates a HandlerContext whose repositories share `session`."""

    def __init__(
        self,
        engines: WorkflowEngineRegistry,
        status_machine: DocumentStatusMachine,
        document_store: IDocumentStore | None = None,
    ) -> None:
        self.engines = engines
        self.status_machine = status_machine
        self.document_store = document_store

    def __call__(self, session: AsyncSession, now: datetime) -> HandlerContext:
        events = EventRepository(session)
        rules = RequirementRuleRepository(session)
        workflow_documents = WorkflowDocumentRepository(session)
        return HandlerContext(
            now=now,
            events=events,
            publisher=PublishEventUseCase(events),
            workflows=WorkflowRepository(session),
            definitions=WorkflowDefinitionRepository(session),
            rules=rules,
            workflow_documents=workflow_documents,
            process_documents=ProcessDocumentRepository(session),
            resolver=RequirementResolver(rules, workflow_documents),
            status_machine=self.status_machine,
            engines=self.engines,
            document_store=self.document_store,
        )
