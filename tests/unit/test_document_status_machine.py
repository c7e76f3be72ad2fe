"""Unit tests for DocumentStatusMachine transitions."""

from datetime import timedelta

import pytest

from operations.application.services.document_status_machine import DocumentStatusMachine
from operations.domain.enums import DocumentStatus, ObjectType
from operations.domain.exceptions import InvalidTransitionException, ValidationException
from tests.builders import T0, make_record

NOW = T0 + timedelta(days=1)


@pytest.fixture
def machine() -> DocumentStatusMachine:
    return DocumentStatusMachine()


class TestProvide:
    def test_requested_to_provided(self, machine: DocumentStatusMachine) -> None:
        record = make_record("ID_CARD")
        provided = machine.provide(record, "doc-9", "alice", NOW)
        assert provided.status is DocumentStatus.PROVIDED
        assert provided.document_id == "doc-9"
        assert provided.provided == NOW
        assert provided.provided_by == "alice"
        assert record.status is DocumentStatus.REQUESTED

    def test_document_id_required(self, machine: DocumentStatusMachine) -> None:
        with pytest.raises(InvalidTransitionException, match="document_id is required"):
            machine.provide(make_record("ID_CARD"), "", "alice", NOW)

    def test_cannot_provide_twice(self, machine: DocumentStatusMachine) -> None:
        record = make_record("ID_CARD", DocumentStatus.PROVIDED)
        with pytest.raises(InvalidTransitionException) as exc_info:
            machine.provide(record, "doc-2", "alice", NOW)
        assert exc_info.value.from_status == "provided"
        assert exc_info.value.to_status == "provided"


class TestVerifyRejectWaive:
    def test_verify(self, machine: DocumentStatusMachine) -> None:
        verified = machine.verify(make_record("ID_CARD", DocumentStatus.PROVIDED), "bob", NOW)
        assert verified.status is DocumentStatus.VERIFIED
        assert verified.verified == NOW
        assert verified.verified_by == "bob"

    def test_verify_requires_provided(self, machine: DocumentStatusMachine) -> None:
        with pytest.raises(InvalidTransitionException):
            machine.verify(make_record("ID_CARD"), "bob", NOW)

    def test_reject_keeps_document_id(self, machine: DocumentStatusMachine) -> None:
        record = make_record("ID_CARD", DocumentStatus.PROVIDED, document_id="doc-7")
        rejected = machine.reject(record, "bob", NOW, "blurry scan")
        assert rejected.status is DocumentStatus.REJECTED
        assert rejected.document_id == "doc-7"
        assert rejected.rejection_reason == "blurry scan"
        assert rejected.rejected_by == "bob"

    def test_reject_requires_reason(self, machine: DocumentStatusMachine) -> None:
        record = make_record("ID_CARD", DocumentStatus.PROVIDED)
        with pytest.raises(ValidationException, match="reason"):
            machine.reject(record, "bob", NOW, "  ")

    @pytest.mark.parametrize("status", [DocumentStatus.REQUESTED, DocumentStatus.PROVIDED])
    def test_waive_from_open_states(
        self, machine: DocumentStatusMachine, status: DocumentStatus
    ) -> None:
        waived = machine.waive(make_record("ID_CARD", status), "carol", NOW, "not applicable")
        assert waived.status is DocumentStatus.WAIVED
        assert waived.waive_reason == "not applicable"
        assert waived.waived == NOW

    def test_works_for_process_documents(self, machine: DocumentStatusMachine) -> None:
        record = make_record("PERMIT", owner_type=ObjectType.PROCESS)
        provided = machine.provide(record, "doc-1", "alice", NOW)
        assert provided.object_type is ObjectType.PROCESS_DOCUMENT


class TestTerminalStates:
    @pytest.mark.parametrize(
        "status", [DocumentStatus.VERIFIED, DocumentStatus.WAIVED, DocumentStatus.REJECTED]
    )
    def test_terminal_states_cannot_be_waived(
        self, machine: DocumentStatusMachine, status: DocumentStatus
    ) -> None:
        with pytest.raises(InvalidTransitionException):
            machine.waive(make_record("ID_CARD", status), "carol", NOW, "late")

    def test_verified_has_no_transitions(self, machine: DocumentStatusMachine) -> None:
        assert machine.allowed_transitions(DocumentStatus.VERIFIED) == frozenset()
        assert not machine.can_transition(DocumentStatus.VERIFIED, DocumentStatus.REJECTED)


class TestResubmission:
    def test_disallowed_by_default(self, machine: DocumentStatusMachine) -> None:
        record = make_record("ID_CARD", DocumentStatus.REJECTED)
        with pytest.raises(InvalidTransitionException, match="resubmission is not allowed"):
            machine.resubmit(record, "alice", NOW)

    def test_allowed_by_policy_clears_submission(self) -> None:
        machine = DocumentStatusMachine(resubmission_allowed=True)
        record = make_record(
            "ID_CARD",
            DocumentStatus.REJECTED,
            provided=T0,
            provided_by="alice",
            rejected=T0,
            rejected_by="bob",
            rejection_reason="expired",
        )
        again = machine.resubmit(record, "alice", NOW)
        assert again.status is DocumentStatus.REQUESTED
        assert again.requested == NOW
        assert again.document_id is None
        assert again.provided is None and again.provided_by is None
        assert again.rejected is None and again.rejection_reason is None
        assert machine.can_transition(DocumentStatus.REJECTED, DocumentStatus.REQUESTED)
