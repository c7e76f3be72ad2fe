"""Tests for domain entities (EventEntity, DocumentRecord) and enums."""

from datetime import timedelta

import pytest

from operations.domain.enums import (
    PROCESS_DOCUMENT_EVENTS,
    WORKFLOW_DOCUMENT_EVENTS,
    DocumentStatus,
    EventStatus,
    EventType,
    ObjectType,
)
from operations.domain.exceptions import ValidationException
from tests.builders import T0, make_event, make_record


class TestEventEntityValidation:
    def test_valid_event(self) -> None:
        event = make_event()
        assert event.status is EventStatus.QUEUED
        assert event.processing_attempts == 0
        assert event.handler_key == (ObjectType.WORKFLOW, EventType.WORKFLOW_CREATED)

    def test_tenant_required(self) -> None:
        with pytest.raises(ValidationException, match="tenant"):
            make_event(tenant_id="")

    def test_negative_attempts_rejected(self) -> None:
        with pytest.raises(ValidationException, match="negative"):
            make_event(processing_attempts=-1)

    def test_lock_columns_set_together(self) -> None:
        with pytest.raises(ValidationException, match="lock_name"):
            make_event(locked=T0)
        with pytest.raises(ValidationException, match="lock_name"):
            make_event(lock_name="worker-1")

    def test_processed_requires_processed_status(self) -> None:
        with pytest.raises(ValidationException, match="status processed"):
            make_event(processed=T0)

    def test_processed_event_cannot_hold_lock(self) -> None:
        with pytest.raises(ValidationException, match="cannot hold a lock"):
            make_event(
                status=EventStatus.PROCESSED,
                processed=T0,
                locked=T0,
                lock_name="worker-1",
            )


class TestEventTransitions:
    def test_after_success_clears_lock_and_stamps_processed(self) -> None:
        now = T0 + timedelta(minutes=1)
        done = make_event().with_lock("worker-1", T0).after_success(now)
        assert done.status is EventStatus.PROCESSED
        assert done.processed == now
        assert done.last_processed == now
        assert done.locked is None and done.lock_name is None
        assert done.processing_attempts == 0

    def test_after_failure_retries_then_fails(self) -> None:
        """attempts=4, max=5: first failure stays queued with 5, the next one fails."""
        now = T0 + timedelta(minutes=1)
        event = make_event(processing_attempts=4).with_lock("worker-1", T0)

        retried = event.after_failure(now, max_processing_attempts=5)
        assert retried.status is EventStatus.QUEUED
        assert retried.processing_attempts == 5
        assert retried.last_processed == now
        assert retried.locked is None and retried.lock_name is None
        assert retried.processed is None

        failed = retried.with_lock("worker-1", now).after_failure(now, 5)
        assert failed.status is EventStatus.FAILED
        assert failed.processing_attempts == 6
        assert failed.locked is None
        assert failed.is_terminal

    def test_after_failure_with_single_attempt_bound(self) -> None:
        event = make_event().with_lock("worker-1", T0)
        assert event.after_failure(T0, 1).status is EventStatus.QUEUED
        exhausted = make_event(processing_attempts=1).with_lock("w", T0)
        assert exhausted.after_failure(T0, 1).status is EventStatus.FAILED

    def test_is_claimable(self) -> None:
        timeout = timedelta(minutes=5)
        assert make_event().is_claimable(T0, timeout)
        locked = make_event().with_lock("worker-1", T0)
        assert not locked.is_claimable(T0 + timedelta(minutes=4), timeout)
        assert locked.is_claimable(T0 + timedelta(minutes=6), timeout)
        assert not make_event(status=EventStatus.FAILED).is_claimable(T0, timeout)

    def test_is_locked_by(self) -> None:
        locked = make_event().with_lock("worker-1", T0)
        assert locked.is_locked_by("worker-1")
        assert not locked.is_locked_by("worker-2")
        assert not make_event().is_locked_by("worker-1")


class TestDocumentRecord:
    def test_object_type_follows_owner(self) -> None:
        assert make_record("ID_CARD").object_type is ObjectType.WORKFLOW_DOCUMENT
        process_record = make_record("ID_CARD", owner_type=ObjectType.PROCESS)
        assert process_record.object_type is ObjectType.PROCESS_DOCUMENT

    def test_live_and_terminal(self) -> None:
        assert make_record("ID_CARD").is_live
        assert not make_record("ID_CARD").is_terminal
        rejected = make_record("ID_CARD", DocumentStatus.REJECTED)
        assert not rejected.is_live
        assert rejected.is_terminal
        assert make_record("ID_CARD", DocumentStatus.VERIFIED).is_terminal


class TestEnums:
    def test_event_status_terminal(self) -> None:
        assert not EventStatus.QUEUED.is_terminal
        assert EventStatus.PROCESSED.is_terminal
        assert EventStatus.FAILED.is_terminal

    def test_values(self) -> None:
        assert EventStatus.values() == ["queued", "processed", "failed"]
        assert "workflow_document" in ObjectType.values()
        assert len(EventType.values()) == 12

    def test_every_document_status_has_an_event(self) -> None:
        assert set(WORKFLOW_DOCUMENT_EVENTS) == set(DocumentStatus)
        assert set(PROCESS_DOCUMENT_EVENTS) == set(DocumentStatus)
        assert all(
            t.value.startswith("process_document_") for t in PROCESS_DOCUMENT_EVENTS.values()
        )
