"""Persistence models: ORM entities and mixins."""

from operations.infrastructure.persistence.models.document import (
    ProcessDocument,
    WorkflowDocument,
)
from operations.infrastructure.persistence.models.event import Event
from operations.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TenantMixin,
)
from operations.infrastructure.persistence.models.workflow import (
    Workflow,
    WorkflowDefinition,
    WorkflowDefinitionDocumentDefinition,
)

__all__ = [
    "CuidMixin",
    "Event",
    "MultiTenantModel",
    "ProcessDocument",
    "TenantMixin",
    "Workflow",
    "WorkflowDefinition",
    "WorkflowDefinitionDocumentDefinition",
    "WorkflowDocument",
]
