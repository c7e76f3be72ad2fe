"""Document record domain entity.

Association of a concrete document with a workflow or process instance,
tracking the lifecycle of a required artifact. Workflow documents and
process documents share this shape; `owner_type` (workflow or process)
tells them apart.
"""

from dataclasses import dataclass
from datetime import datetime

from operations.domain.enums import DocumentStatus, ObjectType

TERMINAL_DOCUMENT_STATUSES = frozenset(
    {DocumentStatus.VERIFIED, DocumentStatus.REJECTED, DocumentStatus.WAIVED}
)


@dataclass(frozen=True)
class DocumentRecord:
    """Immutable workflow/process document record.

    Transitions are applied by DocumentStatusMachine, which returns a new
    record; nothing mutates an instance in place.
    """

    id: str
    tenant_id: str
    owner_type: ObjectType
    owner_id: str
    document_definition_id: str
    status: DocumentStatus
    requested: datetime
    requested_by: str
    document_id: str | None = None
    provided: datetime | None = None
    provided_by: str | None = None
    verified: datetime | None = None
    verified_by: str | None = None
    rejected: datetime | None = None
    rejected_by: str | None = None
    rejection_reason: str | None = None
    waived: datetime | None = None
    waived_by: str | None = None
    waive_reason: str | None = None

    @property
    def object_type(self) -> ObjectType:
        """Event object type for this record (workflow_document or process_document)."""
        if self.owner_type is ObjectType.PROCESS:
            return ObjectType.PROCESS_DOCUMENT
        return ObjectType.WORKFLOW_DOCUMENT

    @property
    def is_live(self) -> bool:
        """Counts towards a requirement (anything but REJECTED)."""
        return self.status is not DocumentStatus.REJECTED

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_DOCUMENT_STATUSES
