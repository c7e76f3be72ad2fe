"""Event worker: claim -> process loop with backoff on storage failures."""

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from datetime import timedelta

from operations.core.config import Settings
from operations.domain.enums import ProcessingOutcome
from operations.domain.exceptions import TransientStorageException
from operations.infrastructure.services.event_claimer import EventClaimer
from operations.infrastructure.services.event_processor import EventProcessor
from operations.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one claim -> process pass."""

    claimed: int
    outcomes: Counter[ProcessingOutcome] = field(default_factory=Counter)


class EventWorker:
    """Runs batches until stopped.

    Events within a batch are processed sequentially in occurred order.
    A TransientStorageException backs off exponentially (capped); after
    max_consecutive_failures in a row it propagates to the supervisor.
    """

    def __init__(
        self,
        claimer: EventClaimer,
        processor: EventProcessor,
        worker_id: str,
        batch_size: int = 10,
        visibility_timeout: timedelta = timedelta(minutes=5),
        poll_interval_seconds: float = 5.0,
        backoff_max_seconds: float = 60.0,
        max_consecutive_failures: int = 10,
    ) -> None:
        self.claimer = claimer
        self.processor = processor
        self.worker_id = worker_id
        self.batch_size = batch_size
        self.visibility_timeout = visibility_timeout
        self.poll_interval_seconds = poll_interval_seconds
        self.backoff_max_seconds = backoff_max_seconds
        self.max_consecutive_failures = max_consecutive_failures
        self._stopping = asyncio.Event()

    @classmethod
    def from_settings(
        cls, settings: Settings, claimer: EventClaimer, processor: EventProcessor
    ) -> "EventWorker":
        return cls(
            claimer=claimer,
            processor=processor,
            worker_id=settings.worker_name,
            batch_size=settings.event_claim_batch_size,
            visibility_timeout=timedelta(
                seconds=settings.event_visibility_timeout_seconds
            ),
            poll_interval_seconds=settings.event_poll_interval_seconds,
            backoff_max_seconds=settings.event_claim_backoff_max_seconds,
            max_consecutive_failures=settings.event_claim_max_consecutive_failures,
        )

    @property
    def stopping(self) -> bool:
        return self._stopping.is_set()

    def stop(self) -> None:
        """Ask the loop to exit after the current batch."""
        self._stopping.set()

    async def run_once(self) -> BatchResult:
        """Claim one batch and process it. Raises TransientStorageException on storage failure."""
        events = await self.claimer.claim(
            self.worker_id, self.batch_size, self.visibility_timeout
        )
        outcomes: Counter[ProcessingOutcome] = Counter()
        for event in events:
            outcomes[await self.processor.process(event)] += 1
        if events:
            logger.info(
                "Worker %s processed batch of %d: %s",
                self.worker_id,
                len(events),
                ", ".join(f"{o.value}={n}" for o, n in sorted(outcomes.items())),
            )
        return BatchResult(claimed=len(events), outcomes=outcomes)

    def backoff_seconds(self, consecutive_failures: int) -> float:
        """Delay before retrying after the given number of consecutive failures."""
        delay = self.poll_interval_seconds * (2 ** max(consecutive_failures - 1, 0))
        return min(delay, self.backoff_max_seconds)

    async def run(self) -> None:
        """Release own stale leases, then loop until stop() is called."""
        logger.info("Event worker %s starting", self.worker_id)
        await self.claimer.reset_locks(self.worker_id)
        consecutive_failures = 0
        while not self.stopping:
            try:
                result = await self.run_once()
            except TransientStorageException as e:
                consecutive_failures += 1
                if consecutive_failures >= self.max_consecutive_failures:
                    logger.error(
                        "Worker %s giving up after %d consecutive storage failures",
                        self.worker_id,
                        consecutive_failures,
                    )
                    raise
                delay = self.backoff_seconds(consecutive_failures)
                logger.warning(
                    "Worker %s storage failure (%s); retrying in %.1fs",
                    self.worker_id,
                    e.message,
                    delay,
                )
                await self._sleep(delay)
                continue
            consecutive_failures = 0
            if result.claimed < self.batch_size:
                await self._sleep(self.poll_interval_seconds)
        logger.info("Event worker %s stopped", self.worker_id)

    async def _sleep(self, seconds: float) -> None:
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=seconds)
        except TimeoutError:
            pass
