"""Document status machine: legal lifecycle transitions for workflow/process documents.

Pure: each transition takes a frozen DocumentRecord and returns a new one.
Persistence and event publication are the caller's concern.
"""

from dataclasses import replace
from datetime import datetime

from operations.domain.entities.document import DocumentRecord
from operations.domain.enums import DocumentStatus
from operations.domain.exceptions import InvalidTransitionException, ValidationException

_BASE_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.REQUESTED: frozenset({DocumentStatus.PROVIDED, DocumentStatus.WAIVED}),
    DocumentStatus.PROVIDED: frozenset(
        {DocumentStatus.VERIFIED, DocumentStatus.REJECTED, DocumentStatus.WAIVED}
    ),
    DocumentStatus.VERIFIED: frozenset(),
    DocumentStatus.REJECTED: frozenset(),
    DocumentStatus.WAIVED: frozenset(),
}


class DocumentStatusMachine:
    """Applies document lifecycle transitions.

    REJECTED -> REQUESTED (resubmission) is only legal when the machine is
    built with resubmission_allowed=True.
    """

    def __init__(self, resubmission_allowed: bool = False) -> None:
        self.resubmission_allowed = resubmission_allowed

    def allowed_transitions(self, status: DocumentStatus) -> frozenset[DocumentStatus]:
        allowed = _BASE_TRANSITIONS[status]
        if status is DocumentStatus.REJECTED and self.resubmission_allowed:
            return allowed | {DocumentStatus.REQUESTED}
        return allowed

    def can_transition(self, from_status: DocumentStatus, to_status: DocumentStatus) -> bool:
        return to_status in self.allowed_transitions(from_status)

    def _check(self, record: DocumentRecord, to_status: DocumentStatus) -> None:
        if not self.can_transition(record.status, to_status):
            reason = None
            if (
                record.status is DocumentStatus.REJECTED
                and to_status is DocumentStatus.REQUESTED
            ):
                reason = "resubmission is not allowed"
            raise InvalidTransitionException(record.status.value, to_status.value, reason)

    def provide(
        self, record: DocumentRecord, document_id: str, actor: str, now: datetime
    ) -> DocumentRecord:
        """REQUESTED -> PROVIDED. Requires the stored document's id."""
        self._check(record, DocumentStatus.PROVIDED)
        if not document_id:
            raise InvalidTransitionException(
                record.status.value,
                DocumentStatus.PROVIDED.value,
                "document_id is required",
            )
        return replace(
            record,
            status=DocumentStatus.PROVIDED,
            document_id=document_id,
            provided=now,
            provided_by=actor,
        )

    def verify(self, record: DocumentRecord, actor: str, now: datetime) -> DocumentRecord:
        """PROVIDED -> VERIFIED."""
        self._check(record, DocumentStatus.VERIFIED)
        return replace(
            record, status=DocumentStatus.VERIFIED, verified=now, verified_by=actor
        )

    def reject(
        self, record: DocumentRecord, actor: str, now: datetime, reason: str
    ) -> DocumentRecord:
        """PROVIDED -> REJECTED. document_id is kept for audit."""
        self._check(record, DocumentStatus.REJECTED)
        if not reason or not reason.strip():
            raise ValidationException("A rejection reason is required", field="reason")
        return replace(
            record,
            status=DocumentStatus.REJECTED,
            rejected=now,
            rejected_by=actor,
            rejection_reason=reason,
        )

    def waive(
        self, record: DocumentRecord, actor: str, now: datetime, reason: str
    ) -> DocumentRecord:
        """REQUESTED or PROVIDED -> WAIVED."""
        self._check(record, DocumentStatus.WAIVED)
        if not reason or not reason.strip():
            raise ValidationException("A waive reason is required", field="reason")
        return replace(
            record,
            status=DocumentStatus.WAIVED,
            waived=now,
            waived_by=actor,
            waive_reason=reason,
        )

    def resubmit(self, record: DocumentRecord, actor: str, now: datetime) -> DocumentRecord:
        """REJECTED -> REQUESTED: a fresh request; submission and rejection are cleared."""
        self._check(record, DocumentStatus.REQUESTED)
        return replace(
            record,
            status=DocumentStatus.REQUESTED,
            requested=now,
            requested_by=actor,
            document_id=None,
            provided=None,
            provided_by=None,
            rejected=None,
            rejected_by=None,
            rejection_reason=None,
        )
