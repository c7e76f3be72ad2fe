"""Event claimer: lease a batch of queued events to one worker."""

from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from operations.domain.entities.event import EventEntity
from operations.domain.exceptions import TransientStorageException
from operations.infrastructure.persistence.repositories.event_repo import EventRepository
from operations.shared.telemetry.logging import get_logger
from operations.shared.telemetry.tracing import add_span_attributes, traced
from operations.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class EventClaimer:
    """Claims events with a per-row compare-and-swap in one transaction.

    Candidates are queued events that are unlocked or whose lease is older
    than the visibility timeout, oldest first. A candidate another worker
    leased in the meantime loses the swap and is dropped silently.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.session_factory = session_factory
        self.clock = clock

    @traced("events.claim")
    async def claim(
        self, worker_id: str, batch_size: int, visibility_timeout: timedelta
    ) -> list[EventEntity]:
        """Lease up to batch_size events to worker_id, in occurred order.

        Raises TransientStorageException when the database round trip fails.
        """
        now = self.clock()
        stale_before = now - visibility_timeout
        claimed: list[EventEntity] = []
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    repo = EventRepository(session)
                    candidates = await repo.claim_candidates(stale_before, batch_size)
                    for candidate in candidates:
                        if await repo.try_lock(candidate.id, worker_id, now, stale_before):
                            claimed.append(candidate.with_lock(worker_id, now))
                        else:
                            logger.debug(
                                "Event %s was claimed by another worker", candidate.id
                            )
        except SQLAlchemyError as e:
            raise TransientStorageException("claim events", cause=e) from e
        add_span_attributes(claimed_count=len(claimed))
        if claimed:
            logger.debug("Worker %s claimed %d event(s)", worker_id, len(claimed))
        return claimed

    async def reset_locks(self, worker_id: str) -> int:
        """Release leases still held under worker_id (e.g. after a crash and restart)."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    released = await EventRepository(session).reset_locks(worker_id)
        except SQLAlchemyError as e:
            raise TransientStorageException("reset event locks", cause=e) from e
        if released:
            logger.info("Released %d event lock(s) held by %s", released, worker_id)
        return released
