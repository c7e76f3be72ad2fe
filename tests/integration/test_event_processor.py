"""EventProcessor integration tests: commit on success, retry and dead-letter, lost leases."""

from datetime import timedelta

import pytest

from operations.application.services.document_status_machine import DocumentStatusMachine
from operations.application.services.event_dispatch import HandlerRegistry
from operations.domain.enums import EventStatus, EventType, ObjectType, ProcessingOutcome
from operations.domain.exceptions import ValidationException
from operations.infrastructure.persistence.repositories import EventRepository
from operations.infrastructure.services import (
    EventClaimer,
    EventProcessor,
    HandlerContextFactory,
)
from operations.infrastructure.workflow_engines import build_workflow_engine_registry
from operations.shared.utils.datetime import utc_now
from tests.builders import T0, TENANT_ID, add_events, get_event, make_event

TIMEOUT = timedelta(minutes=5)


class _PublishingHandler:
    """Publishes a follow-up event, then optionally fails."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = 0

    async def handle(self, event, context) -> None:
        self.calls += 1
        await context.publisher.publish(
            tenant_id=event.tenant_id,
            event_type=EventType.WORKFLOW_STATUS_CHANGED,
            object_type=ObjectType.WORKFLOW,
            object_id=event.object_id,
            actor="handler",
            event_id=f"follow-up-{event.id}-{self.calls}",
        )
        if self.fail:
            raise RuntimeError("engine unavailable")


def _processor(session_factory, handler, max_attempts: int = 5) -> EventProcessor:
    handlers = HandlerRegistry()
    handlers.register(ObjectType.WORKFLOW, EventType.WORKFLOW_CREATED, handler)
    return EventProcessor(
        session_factory=session_factory,
        handlers=handlers,
        context_factory=HandlerContextFactory(
            engines=build_workflow_engine_registry(),
            status_machine=DocumentStatusMachine(),
        ),
        max_processing_attempts=max_attempts,
    )


async def _claim_one(session_factory, worker_id: str = "worker-1", clock=utc_now):
    [event] = await EventClaimer(session_factory, clock=clock).claim(worker_id, 1, TIMEOUT)
    return event


async def _event_ids(session_factory) -> set[str]:
    async with session_factory() as session:
        counts = await EventRepository(session).count_by_status(TENANT_ID)
        events = await EventRepository(session).list_for_object(
            TENANT_ID, ObjectType.WORKFLOW, "wf-1"
        )
    assert sum(counts.values()) == len(events)
    return {e.id for e in events}


async def test_success_commits_handler_writes_with_processed_mark(session_factory) -> None:
    await add_events(session_factory, make_event(event_id="evt-1"))
    handler = _PublishingHandler()
    event = await _claim_one(session_factory)

    outcome = await _processor(session_factory, handler).process(event)

    assert outcome is ProcessingOutcome.PROCESSED
    stored = await get_event(session_factory, "evt-1")
    assert stored.status is EventStatus.PROCESSED
    assert stored.processed is not None
    assert stored.last_processed == stored.processed
    assert stored.locked is None and stored.lock_name is None
    assert await _event_ids(session_factory) == {"evt-1", "follow-up-evt-1-1"}


async def test_failure_rolls_back_and_releases_for_retry(session_factory) -> None:
    await add_events(session_factory, make_event(event_id="evt-1"))
    event = await _claim_one(session_factory)

    outcome = await _processor(session_factory, _PublishingHandler(fail=True)).process(event)

    assert outcome is ProcessingOutcome.RETRY
    stored = await get_event(session_factory, "evt-1")
    assert stored.status is EventStatus.QUEUED
    assert stored.processing_attempts == 1
    assert stored.last_processed is not None
    assert stored.processed is None
    assert stored.locked is None
    assert await _event_ids(session_factory) == {"evt-1"}


async def test_fifth_attempt_retries_then_dead_letters(session_factory) -> None:
    await add_events(session_factory, make_event(event_id="evt-1", processing_attempts=4))
    processor = _processor(session_factory, _PublishingHandler(fail=True), max_attempts=5)

    first = await processor.process(await _claim_one(session_factory))
    assert first is ProcessingOutcome.RETRY
    assert (await get_event(session_factory, "evt-1")).processing_attempts == 5

    second = await processor.process(await _claim_one(session_factory))
    assert second is ProcessingOutcome.DEAD_LETTERED
    stored = await get_event(session_factory, "evt-1")
    assert stored.status is EventStatus.FAILED
    assert stored.processing_attempts == 6
    assert stored.locked is None

    assert await EventClaimer(session_factory).claim("worker-1", 10, TIMEOUT) == []


async def test_event_without_handler_is_marked_processed(session_factory) -> None:
    await add_events(
        session_factory,
        make_event(
            event_id="evt-1",
            object_type=ObjectType.PROCESS_DOCUMENT,
            object_id="pd-1",
            event_type=EventType.PROCESS_DOCUMENT_PROVIDED,
        ),
    )
    outcome = await _processor(session_factory, _PublishingHandler()).process(
        await _claim_one(session_factory)
    )
    assert outcome is ProcessingOutcome.PROCESSED
    assert (await get_event(session_factory, "evt-1")).status is EventStatus.PROCESSED


@pytest.mark.parametrize("fail", [False, True])
async def test_lost_lease_leaves_event_to_new_owner(session_factory, fail: bool) -> None:
    await add_events(session_factory, make_event(event_id="evt-1"))
    stale = await _claim_one(session_factory, "worker-1")
    await _claim_one(
        session_factory, "worker-2", clock=lambda: utc_now() + timedelta(minutes=10)
    )

    outcome = await _processor(session_factory, _PublishingHandler(fail=fail)).process(stale)

    assert outcome is ProcessingOutcome.LOCK_LOST
    stored = await get_event(session_factory, "evt-1")
    assert stored.status is EventStatus.QUEUED
    assert stored.lock_name == "worker-2"
    assert stored.processing_attempts == 0
    assert await _event_ids(session_factory) == {"evt-1"}


@pytest.mark.parametrize("fail", [False, True])
async def test_older_lease_under_the_same_name_cannot_finalize(
    session_factory, fail: bool
) -> None:
    await add_events(session_factory, make_event(event_id="evt-1"))
    first = T0 + timedelta(minutes=1)
    second = T0 + timedelta(minutes=10)
    stale = await _claim_one(session_factory, "worker-1", clock=lambda: first)
    fresh = await _claim_one(session_factory, "worker-1", clock=lambda: second)
    processor = _processor(session_factory, _PublishingHandler(fail=fail))

    assert await processor.process(stale) is ProcessingOutcome.LOCK_LOST
    stored = await get_event(session_factory, "evt-1")
    assert stored.status is EventStatus.QUEUED
    assert stored.locked == second
    assert stored.processing_attempts == 0
    assert await _event_ids(session_factory) == {"evt-1"}

    expected = ProcessingOutcome.RETRY if fail else ProcessingOutcome.PROCESSED
    assert await processor.process(fresh) is expected


async def test_unclaimed_event_is_rejected(session_factory) -> None:
    processor = _processor(session_factory, _PublishingHandler())
    with pytest.raises(ValidationException, match="claimed"):
        await processor.process(make_event(event_id="evt-1"))


def test_attempt_bound_must_be_positive() -> None:
    with pytest.raises(ValidationException):
        _processor(None, _PublishingHandler(), max_attempts=0)
