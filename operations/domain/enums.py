"""Domain enumerations for the operations core.

Closed sets of values for event dispatch, document lifecycle and
requirement resolution. All are str Enums so they persist as plain strings.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class EventStatus(_ValuesMixin, str, Enum):
    """Event processing status. PROCESSED and FAILED are terminal."""

    QUEUED = "queued"
    PROCESSED = "processed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not EventStatus.QUEUED


class ObjectType(_ValuesMixin, str, Enum):
    """Type of domain object an event refers to."""

    WORKFLOW = "workflow"
    WORKFLOW_DOCUMENT = "workflow_document"
    PROCESS = "process"
    PROCESS_DOCUMENT = "process_document"
    DOCUMENT = "document"


class EventType(_ValuesMixin, str, Enum):
    """What happened to the object."""

    WORKFLOW_CREATED = "workflow_created"
    WORKFLOW_STATUS_CHANGED = "workflow_status_changed"
    WORKFLOW_DOCUMENT_REQUESTED = "workflow_document_requested"
    WORKFLOW_DOCUMENT_PROVIDED = "workflow_document_provided"
    WORKFLOW_DOCUMENT_VERIFIED = "workflow_document_verified"
    WORKFLOW_DOCUMENT_REJECTED = "workflow_document_rejected"
    WORKFLOW_DOCUMENT_WAIVED = "workflow_document_waived"
    PROCESS_DOCUMENT_REQUESTED = "process_document_requested"
    PROCESS_DOCUMENT_PROVIDED = "process_document_provided"
    PROCESS_DOCUMENT_VERIFIED = "process_document_verified"
    PROCESS_DOCUMENT_REJECTED = "process_document_rejected"
    PROCESS_DOCUMENT_WAIVED = "process_document_waived"


class DocumentStatus(_ValuesMixin, str, Enum):
    """Lifecycle status of a workflow or process document."""

    REQUESTED = "requested"
    PROVIDED = "provided"
    VERIFIED = "verified"
    REJECTED = "rejected"
    WAIVED = "waived"


# Event emitted when a workflow document enters each status.
WORKFLOW_DOCUMENT_EVENTS: dict[DocumentStatus, EventType] = {
    DocumentStatus.REQUESTED: EventType.WORKFLOW_DOCUMENT_REQUESTED,
    DocumentStatus.PROVIDED: EventType.WORKFLOW_DOCUMENT_PROVIDED,
    DocumentStatus.VERIFIED: EventType.WORKFLOW_DOCUMENT_VERIFIED,
    DocumentStatus.REJECTED: EventType.WORKFLOW_DOCUMENT_REJECTED,
    DocumentStatus.WAIVED: EventType.WORKFLOW_DOCUMENT_WAIVED,
}

PROCESS_DOCUMENT_EVENTS: dict[DocumentStatus, EventType] = {
    DocumentStatus.REQUESTED: EventType.PROCESS_DOCUMENT_REQUESTED,
    DocumentStatus.PROVIDED: EventType.PROCESS_DOCUMENT_PROVIDED,
    DocumentStatus.VERIFIED: EventType.PROCESS_DOCUMENT_VERIFIED,
    DocumentStatus.REJECTED: EventType.PROCESS_DOCUMENT_REJECTED,
    DocumentStatus.WAIVED: EventType.PROCESS_DOCUMENT_WAIVED,
}


class ValidityPeriodUnit(_ValuesMixin, str, Enum):
    """Calendar unit of a document validity period."""

    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


class ProcessingOutcome(_ValuesMixin, str, Enum):
    """Result of processing one claimed event.

    LOCK_LOST means the lock expired mid-processing and another worker
    reclaimed the event; nothing was written for this attempt.
    """

    PROCESSED = "processed"
    RETRY = "retry"
    DEAD_LETTERED = "dead_lettered"
    LOCK_LOST = "lock_lost"


class RequirementState(_ValuesMixin, str, Enum):
    """Whether a document requirement is currently met."""

    SATISFIED = "satisfied"
    OUTSTANDING = "outstanding"


class RequirementReason(_ValuesMixin, str, Enum):
    """Why a requirement is satisfied or outstanding."""

    NOT_REQUESTED = "not requested"
    AWAITING_SUBMISSION = "awaiting submission"
    AWAITING_VERIFICATION = "awaiting verification"
    EXPIRED = "expired, resubmission required"
    REJECTED = "rejected, resubmission required"
    VERIFIED = "verified"
    PROVIDED = "provided"
    WAIVED = "waived"


class WorkflowStatus(_ValuesMixin, str, Enum):
    """Workflow instance status (owned by the workflow engine)."""

    INITIATED = "initiated"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
