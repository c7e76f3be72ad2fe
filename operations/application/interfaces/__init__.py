"""Application ports (Protocols) implemented by infrastructure."""

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
    IWorkflowEngine,
)

__all__ = [
    "IDocumentRecordRepository",
    "IDocumentStore",
    "IEventHandler",
    "IEventPublisher",
    "IEventRepository",
    "IRequirementRuleRepository",
    "IWorkflowDefinitionRepository",
    "IWorkflowEngine",
    "IWorkflowRepository",
]
