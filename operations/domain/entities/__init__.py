"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from operations.domain.entities.document import DocumentRecord
from operations.domain.entities.event import EventEntity
from operations.domain.entities.workflow import (
    DocumentRequirementRule,
    WorkflowDefinitionEntity,
    WorkflowEntity,
)

__all__ = [
    "DocumentRecord",
    "DocumentRequirementRule",
    "EventEntity",
    "WorkflowDefinitionEntity",
    "WorkflowEntity",
]
