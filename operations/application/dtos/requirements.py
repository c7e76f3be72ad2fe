"""DTOs for document requirement resolution of a workflow."""

from dataclasses import dataclass, field
from datetime import datetime

from operations.domain.enums import RequirementReason, RequirementState


@dataclass(frozen=True)
class RequirementItem:
    """Classification of one requirement rule against the workflow's documents."""

    document_definition_id: str
    state: RequirementState
    reason: RequirementReason
    required: bool
    internal: bool = False
    document_record_id: str | None = None  # record the classification was based on
    expires: datetime | None = None  # set when the rule has a validity period

    @property
    def is_satisfied(self) -> bool:
        return self.state is RequirementState.SATISFIED


@dataclass(frozen=True)
class RequirementConflict:
    """More than one live document for a singular rule; the latest request wins."""

    document_definition_id: str
    kept_record_id: str
    superseded_record_ids: tuple[str, ...]
    internal: bool = False


@dataclass(frozen=True)
class RequirementResolution:
    """Result of resolving a workflow's document requirements at a point in time."""

    workflow_id: str
    satisfied: list[RequirementItem] = field(default_factory=list)
    outstanding: list[RequirementItem] = field(default_factory=list)
    optional_outstanding: list[RequirementItem] = field(default_factory=list)
    conflicts: list[RequirementConflict] = field(default_factory=list)

    @property
    def can_proceed(self) -> bool:
        """True when no required document is outstanding."""
        return not self.outstanding

    def without_internal(self) -> "RequirementResolution":
        """Copy with internal-only requirements removed (for external parties)."""
        return RequirementResolution(
            workflow_id=self.workflow_id,
            satisfied=[i for i in self.satisfied if not i.internal],
            outstanding=[i for i in self.outstanding if not i.internal],
            optional_outstanding=[i for i in self.optional_outstanding if not i.internal],
            conflicts=[c for c in self.conflicts if not c.internal],
        )
