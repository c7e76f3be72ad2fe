"""Unit tests for the EventWorker loop with fake claimer and processor."""

from datetime import timedelta

import pytest

from operations.core.config import Settings
from operations.domain.enums import ProcessingOutcome
from operations.domain.exceptions import TransientStorageException
from operations.infrastructure.services.event_worker import EventWorker
from tests.builders import T0, make_event


class _FakeClaimer:
    """Serves prepared batches, optionally failing first; stops the worker when drained."""

    def __init__(self, batches=None, failures: int = 0) -> None:
        self.batches = list(batches or [])
        self.failures = failures
        self.claims = 0
        self.reset_calls: list[str] = []
        self.worker: EventWorker | None = None

    async def claim(self, worker_id, batch_size, visibility_timeout):
        self.claims += 1
        if self.failures:
            self.failures -= 1
            raise TransientStorageException("claim events")
        if self.batches:
            return self.batches.pop(0)
        if self.worker is not None:
            self.worker.stop()
        return []

    async def reset_locks(self, worker_id):
        self.reset_calls.append(worker_id)
        return 0


class _FakeProcessor:
    def __init__(self, outcome: ProcessingOutcome = ProcessingOutcome.PROCESSED) -> None:
        self.outcome = outcome
        self.processed: list[str] = []

    async def process(self, event):
        self.processed.append(event.id)
        return self.outcome


def _worker(claimer: _FakeClaimer, processor: _FakeProcessor, **kwargs) -> EventWorker:
    options = {
        "worker_id": "worker-1",
        "batch_size": 2,
        "poll_interval_seconds": 0.001,
        "backoff_max_seconds": 0.001,
    }
    options.update(kwargs)
    worker = EventWorker(claimer, processor, **options)
    claimer.worker = worker
    return worker


def _claimed(event_id: str):
    return make_event(event_id=event_id).with_lock("worker-1", T0)


def test_backoff_is_exponential_and_capped() -> None:
    worker = EventWorker(
        _FakeClaimer(), _FakeProcessor(), "w", poll_interval_seconds=1.0, backoff_max_seconds=10.0
    )
    assert [worker.backoff_seconds(n) for n in (1, 2, 3, 4, 5)] == [1.0, 2.0, 4.0, 8.0, 10.0]


def test_from_settings() -> None:
    settings = Settings(
        worker_name="node-7",
        event_claim_batch_size=25,
        event_visibility_timeout_seconds=60,
    )
    worker = EventWorker.from_settings(settings, _FakeClaimer(), _FakeProcessor())
    assert worker.worker_id == "node-7"
    assert worker.batch_size == 25
    assert worker.visibility_timeout == timedelta(seconds=60)


async def test_run_once_processes_batch_in_order() -> None:
    claimer = _FakeClaimer(batches=[[_claimed("e1"), _claimed("e2")]])
    processor = _FakeProcessor()
    result = await _worker(claimer, processor).run_once()
    assert result.claimed == 2
    assert result.outcomes[ProcessingOutcome.PROCESSED] == 2
    assert processor.processed == ["e1", "e2"]


async def test_run_resets_own_locks_and_stops() -> None:
    claimer = _FakeClaimer(batches=[[_claimed("e1"), _claimed("e2")], [_claimed("e3")]])
    processor = _FakeProcessor()
    worker = _worker(claimer, processor)
    await worker.run()
    assert claimer.reset_calls == ["worker-1"]
    assert processor.processed == ["e1", "e2", "e3"]
    assert worker.stopping


async def test_run_recovers_from_transient_failures() -> None:
    claimer = _FakeClaimer(batches=[[_claimed("e1")]], failures=2)
    processor = _FakeProcessor()
    await _worker(claimer, processor, max_consecutive_failures=3).run()
    assert processor.processed == ["e1"]
    assert claimer.claims == 4


async def test_run_gives_up_after_consecutive_failures() -> None:
    claimer = _FakeClaimer(failures=100)
    worker = _worker(claimer, _FakeProcessor(), max_consecutive_failures=3)
    with pytest.raises(TransientStorageException):
        await worker.run()
    assert claimer.claims == 3
