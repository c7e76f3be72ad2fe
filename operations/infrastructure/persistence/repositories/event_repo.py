"""Event repository. Queue storage for events; returns domain EventEntity values.

State changes after insert go through guarded UPDATE statements only:
a claim is a per-row compare-and-swap on the lease columns, and the
finalize write only lands while the caller still holds the lock. Reads use
populate_existing so rows changed by those statements are never stale.
"""

from datetime import datetime

from sqlalchemy import and_, asc, desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from operations.domain.entities.event import EventEntity
from operations.domain.enums import EventStatus, EventType, ObjectType
from operations.infrastructure.persistence.models.event import Event
from operations.infrastructure.persistence.repositories.base import BaseRepository
from operations.shared.utils.datetime import ensure_utc


def _event_to_entity(e: Event) -> EventEntity:
    """Map ORM Event to domain EventEntity."""
    return EventEntity(
        id=e.id,
        tenant_id=e.tenant_id,
        object_type=ObjectType(e.object_type),
        object_id=e.object_id,
        type=EventType(e.type),
        occurred=ensure_utc(e.occurred),
        actor=e.actor,
        status=EventStatus(e.status),
        processing_attempts=e.processing_attempts,
        locked=ensure_utc(e.locked) if e.locked else None,
        lock_name=e.lock_name,
        last_processed=ensure_utc(e.last_processed) if e.last_processed else None,
        processed=ensure_utc(e.processed) if e.processed else None,
    )


def _claimable(stale_before: datetime):
    """Queued and either unlocked or holding a lease older than stale_before."""
    return and_(
        Event.status == EventStatus.QUEUED.value,
        or_(Event.locked.is_(None), Event.locked < stale_before),
    )


class EventRepository(BaseRepository[Event]):
    """Event repository. Rows are never deleted; terminal rows are never updated."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Event)

    async def add(self, event: EventEntity) -> EventEntity:
        """Insert a new event row."""
        row = Event(
            id=event.id,
            tenant_id=event.tenant_id,
            object_type=event.object_type.value,
            object_id=event.object_id,
            type=event.type.value,
            occurred=event.occurred,
            actor=event.actor,
            status=event.status.value,
            processing_attempts=event.processing_attempts,
            locked=event.locked,
            lock_name=event.lock_name,
            last_processed=event.last_processed,
            processed=event.processed,
        )
        created = await self._insert(row)
        return _event_to_entity(created)

    async def exists(self, event_id: str) -> bool:
        result = await self.db.execute(select(Event.id).where(Event.id == event_id))
        return result.scalar_one_or_none() is not None

    async def get_by_id(
        self, event_id: str, tenant_id: str | None = None
    ) -> EventEntity | None:
        q = select(Event).where(Event.id == event_id).execution_options(
            populate_existing=True
        )
        if tenant_id is not None:
            q = q.where(Event.tenant_id == tenant_id)
        result = await self.db.execute(q)
        row = result.scalar_one_or_none()
        return _event_to_entity(row) if row else None

    async def list_for_object(
        self,
        tenant_id: str,
        object_type: ObjectType,
        object_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> list[EventEntity]:
        """Events for one object, oldest first."""
        result = await self.db.execute(
            select(Event)
            .where(
                Event.tenant_id == tenant_id,
                Event.object_type == object_type.value,
                Event.object_id == object_id,
            )
            .order_by(asc(Event.occurred), asc(Event.id))
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return [_event_to_entity(e) for e in result.scalars().all()]

    async def list_failed(
        self, tenant_id: str, skip: int = 0, limit: int = 100
    ) -> list[EventEntity]:
        """Dead-lettered events, most recently attempted first."""
        result = await self.db.execute(
            select(Event)
            .where(
                Event.tenant_id == tenant_id,
                Event.status == EventStatus.FAILED.value,
            )
            .order_by(desc(Event.last_processed), desc(Event.id))
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return [_event_to_entity(e) for e in result.scalars().all()]

    async def count_by_status(self, tenant_id: str) -> dict[str, int]:
        """Return event counts per status for tenant (every status present, zero if none)."""
        result = await self.db.execute(
            select(Event.status, func.count(Event.id))
            .where(Event.tenant_id == tenant_id)
            .group_by(Event.status)
        )
        counts = dict.fromkeys(EventStatus.values(), 0)
        counts.update({status: count for status, count in result.all()})
        return counts

    async def claim_candidates(
        self, stale_before: datetime, limit: int
    ) -> list[EventEntity]:
        """Select claimable events in occurred order.

        Uses FOR UPDATE SKIP LOCKED where the dialect supports it so
        concurrent claimers do not wait on each other's candidate rows.
        """
        result = await self.db.execute(
            select(Event)
            .where(_claimable(stale_before))
            .order_by(asc(Event.occurred), asc(Event.id))
            .limit(limit)
            .with_for_update(skip_locked=True)
            .execution_options(populate_existing=True)
        )
        return [_event_to_entity(e) for e in result.scalars().all()]

    async def try_lock(
        self,
        event_id: str,
        lock_name: str,
        now: datetime,
        stale_before: datetime,
    ) -> bool:
        """Compare-and-swap the lease onto one event. False if another claimer won."""
        result = await self.db.execute(
            update(Event)
            .where(Event.id == event_id, _claimable(stale_before))
            .values(locked=now, lock_name=lock_name)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def apply_transition(
        self, event: EventEntity, lock_name: str, locked: datetime
    ) -> bool:
        """Write a post-processing state, guarded by lease ownership.

        Matches only while the row is still QUEUED and holds the lease taken
        by lock_name at `locked`. A later lease under the same name (after
        expiry and reclaim, or a reset) does not match. Returns False when
        the lease was lost (no row updated).
        """
        result = await self.db.execute(
            update(Event)
            .where(
                Event.id == event.id,
                Event.status == EventStatus.QUEUED.value,
                Event.lock_name == lock_name,
                Event.locked == locked,
            )
            .values(
                status=event.status.value,
                processing_attempts=event.processing_attempts,
                locked=event.locked,
                lock_name=event.lock_name,
                last_processed=event.last_processed,
                processed=event.processed,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def reset_locks(self, lock_name: str) -> int:
        """Release leases held under lock_name on queued events. Returns rows released."""
        result = await self.db.execute(
            update(Event)
            .where(
                Event.status == EventStatus.QUEUED.value,
                Event.lock_name == lock_name,
            )
            .values(locked=None, lock_name=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

