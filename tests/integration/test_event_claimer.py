"""EventClaimer integration tests: ordering, exclusivity (sequential and interleaved), stale reclaim."""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from operations.domain.enums import EventStatus
from operations.domain.exceptions import TransientStorageException
from operations.infrastructure.persistence.database import create_session_factory
from operations.infrastructure.persistence.repositories import EventRepository
from operations.infrastructure.services import EventClaimer
from tests.builders import T0, add_events, get_event, make_event

TIMEOUT = timedelta(minutes=5)


def _clock(at):
    return lambda: at


async def test_claims_oldest_first_up_to_batch_size(session_factory) -> None:
    await add_events(
        session_factory,
        make_event(event_id="e3", occurred=T0 + timedelta(minutes=2)),
        make_event(event_id="e1", occurred=T0),
        make_event(event_id="e2", occurred=T0 + timedelta(minutes=1)),
    )
    now = T0 + timedelta(minutes=10)
    claimer = EventClaimer(session_factory, clock=_clock(now))

    claimed = await claimer.claim("worker-1", 2, TIMEOUT)

    assert [e.id for e in claimed] == ["e1", "e2"]
    assert all(e.lock_name == "worker-1" and e.locked == now for e in claimed)
    stored = await get_event(session_factory, "e1")
    assert stored.lock_name == "worker-1"
    assert (await get_event(session_factory, "e3")).locked is None


async def test_ties_on_occurred_break_by_id(session_factory) -> None:
    await add_events(
        session_factory, make_event(event_id="b"), make_event(event_id="a")
    )
    claimed = await EventClaimer(session_factory).claim("worker-1", 10, TIMEOUT)
    assert [e.id for e in claimed] == ["a", "b"]


async def test_leased_events_are_not_claimed_twice(session_factory) -> None:
    await add_events(session_factory, make_event(event_id="e1"), make_event(event_id="e2"))
    now = T0 + timedelta(minutes=1)

    first = await EventClaimer(session_factory, clock=_clock(now)).claim("worker-1", 10, TIMEOUT)
    second = await EventClaimer(session_factory, clock=_clock(now)).claim(
        "worker-2", 10, TIMEOUT
    )

    assert {e.id for e in first} == {"e1", "e2"}
    assert second == []


async def test_interleaved_claimers_never_share_an_event(session_factory, monkeypatch) -> None:
    await add_events(session_factory, make_event(event_id="e1"), make_event(event_id="e2"))
    read_candidates = EventRepository.claim_candidates
    both_read = asyncio.Event()
    first_done = asyncio.Event()
    reads = 0
    seen: list[set[str]] = []

    async def gated(self, stale_before, limit):
        # both claimers see the same candidates before either swaps
        nonlocal reads
        candidates = await read_candidates(self, stale_before, limit)
        reads += 1
        order = reads
        seen.append({c.id for c in candidates})
        if reads == 2:
            both_read.set()
        await both_read.wait()
        if order == 2:
            await first_done.wait()
        return candidates

    monkeypatch.setattr(EventRepository, "claim_candidates", gated)
    now = T0 + timedelta(minutes=1)

    async def claim(worker_id):
        try:
            return await EventClaimer(session_factory, clock=_clock(now)).claim(
                worker_id, 10, TIMEOUT
            )
        finally:
            first_done.set()

    one, two = await asyncio.gather(claim("worker-1"), claim("worker-2"))

    assert seen == [{"e1", "e2"}, {"e1", "e2"}]
    ids_one = {e.id for e in one}
    ids_two = {e.id for e in two}
    assert ids_one.isdisjoint(ids_two)
    assert ids_one | ids_two == {"e1", "e2"}
    winner, claimed = ("worker-1", one) if one else ("worker-2", two)
    assert len(claimed) == 2
    for event_id in ("e1", "e2"):
        assert (await get_event(session_factory, event_id)).lock_name == winner


async def test_stale_lease_is_reclaimed(session_factory) -> None:
    await add_events(session_factory, make_event(event_id="e1"))
    await EventClaimer(session_factory, clock=_clock(T0)).claim("worker-1", 10, TIMEOUT)

    not_yet = await EventClaimer(
        session_factory, clock=_clock(T0 + timedelta(minutes=4))
    ).claim("worker-2", 10, TIMEOUT)
    assert not_yet == []

    later = T0 + timedelta(minutes=6)
    reclaimed = await EventClaimer(session_factory, clock=_clock(later)).claim(
        "worker-2", 10, TIMEOUT
    )
    assert [e.id for e in reclaimed] == ["e1"]
    stored = await get_event(session_factory, "e1")
    assert stored.lock_name == "worker-2"
    assert stored.locked == later


async def test_terminal_events_are_never_claimed(session_factory) -> None:
    await add_events(
        session_factory,
        make_event(event_id="done", status=EventStatus.PROCESSED, processed=T0),
        make_event(event_id="dead", status=EventStatus.FAILED, processing_attempts=6),
    )
    assert await EventClaimer(session_factory).claim("worker-1", 10, TIMEOUT) == []


async def test_reset_locks_releases_own_leases(session_factory) -> None:
    await add_events(session_factory, make_event(event_id="e1"))
    claimer = EventClaimer(session_factory, clock=_clock(T0))
    await claimer.claim("worker-1", 10, TIMEOUT)

    assert await claimer.reset_locks("worker-1") == 1
    again = await EventClaimer(session_factory, clock=_clock(T0)).claim(
        "worker-2", 10, TIMEOUT
    )
    assert [e.id for e in again] == ["e1"]


async def test_storage_failure_raises_transient(tmp_path) -> None:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    try:
        claimer = EventClaimer(create_session_factory(engine))
        with pytest.raises(TransientStorageException, match="claim events"):
            await claimer.claim("worker-1", 10, TIMEOUT)
    finally:
        await engine.dispose()
