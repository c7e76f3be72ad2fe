"""Workflow domain entities.

A workflow definition is keyed by (id, version) and names the engine that
runs it. Requirement rules reference their definition by those ids only;
nothing holds a pointer back to its parent.
"""

from dataclasses import dataclass

from operations.domain.enums import WorkflowStatus
from operations.domain.value_objects.core import ValidityPeriod


@dataclass(frozen=True)
class WorkflowDefinitionEntity:
    """Workflow definition version and the engine that executes it."""

    id: str
    version: int
    name: str
    engine_id: str

    @property
    def key(self) -> tuple[str, int]:
        return (self.id, self.version)


@dataclass(frozen=True)
class WorkflowEntity:
    """Workflow instance."""

    id: str
    tenant_id: str
    definition_id: str
    definition_version: int
    status: WorkflowStatus
    engine_instance_id: str | None = None


@dataclass(frozen=True)
class DocumentRequirementRule:
    """Documents with this definition id are required/optional for the definition version.

    singular: at most one live document of this definition per workflow.
    verifiable: a verification step follows submission; when False a
        PROVIDED document already satisfies the rule.
    internal: internal-only document, excluded for external parties.
    """

    workflow_definition_id: str
    workflow_definition_version: int
    document_definition_id: str
    required: bool
    singular: bool
    verifiable: bool = True
    internal: bool = False
    validity_period: ValidityPeriod | None = None
