"""Persistence repositories. Re-exports for dependency injection."""

from operations.infrastructure.persistence.repositories.base import BaseRepository
from operations.infrastructure.persistence.repositories.document_repo import (
    ProcessDocumentRepository,
    WorkflowDocumentRepository,
)
from operations.infrastructure.persistence.repositories.event_repo import EventRepository
from operations.infrastructure.persistence.repositories.requirement_rule_repo import (
    RequirementRuleRepository,
)
from operations.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowDefinitionRepository,
    WorkflowRepository,
)

__all__ = [
    "BaseRepository",
    "EventRepository",
    "ProcessDocumentRepository",
    "RequirementRuleRepository",
    "WorkflowDefinitionRepository",
    "WorkflowDocumentRepository",
    "WorkflowRepository",
]
