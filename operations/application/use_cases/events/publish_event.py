"""Event publication use case: append a QUEUED event in the caller's transaction."""

from __future__ import annotations

from datetime import datetime

from operations.application.interfaces.repositories import IEventRepository
from operations.domain.entities.event import EventEntity
from operations.domain.enums import EventStatus, EventType, ObjectType
from operations.domain.exceptions import DuplicateEventException
from operations.shared.telemetry.logging import get_logger
from operations.shared.utils.datetime import utc_now
from operations.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class PublishEventUseCase:
    """Appends events to the queue (IEventPublisher).

    Does not commit: the event becomes visible to workers together with the
    domain change it describes.
    """

    def __init__(self, event_repo: IEventRepository) -> None:
        self.event_repo = event_repo

    async def publish(
        self,
        tenant_id: str,
        event_type: EventType,
        object_type: ObjectType,
        object_id: str,
        actor: str,
        occurred: datetime | None = None,
        event_id: str | None = None,
    ) -> EventEntity:
        """Append one QUEUED event. Raises DuplicateEventException for a known event_id."""
        if event_id is not None and await self.event_repo.exists(event_id):
            raise DuplicateEventException(event_id)
        event = EventEntity(
            id=event_id or generate_cuid(),
            tenant_id=tenant_id,
            object_type=ObjectType(object_type),
            object_id=object_id,
            type=EventType(event_type),
            occurred=occurred or utc_now(),
            actor=actor,
            status=EventStatus.QUEUED,
        )
        created = await self.event_repo.add(event)
        logger.debug(
            "Published event %s (%s/%s) for %s",
            created.id,
            created.object_type.value,
            created.type.value,
            created.object_id,
        )
        return created
