"""Event domain entity.

A queued fact about a domain change, processed at-least-once by workers.
The entity is frozen: every state change (claim, success, failure) is a
pure function returning a new value, which the repository then writes
under a single conditional update.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from operations.domain.enums import EventStatus, EventType, ObjectType
from operations.domain.exceptions import ValidationException


@dataclass(frozen=True)
class EventEntity:
    """Immutable domain entity for an event row.

    Validation runs on construction and enforces the lock/processed
    invariants, so an inconsistent value cannot be built.
    """

    id: str
    tenant_id: str
    object_type: ObjectType
    object_id: str
    type: EventType
    occurred: datetime
    actor: str
    status: EventStatus = EventStatus.QUEUED
    processing_attempts: int = 0
    locked: datetime | None = None
    lock_name: str | None = None
    last_processed: datetime | None = None
    processed: datetime | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate event invariants. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Event ID is required", field="id")
        if not self.tenant_id:
            raise ValidationException("Event must belong to a tenant", field="tenant_id")
        if not self.object_id:
            raise ValidationException("Event must reference an object", field="object_id")
        if not self.actor:
            raise ValidationException("Event actor is required", field="actor")
        if self.processing_attempts < 0:
            raise ValidationException(
                "Processing attempts cannot be negative", field="processing_attempts"
            )
        if (self.locked is None) != (self.lock_name is None):
            raise ValidationException(
                "locked and lock_name must both be set or both be null", field="locked"
            )
        if self.processed is not None:
            if self.status is not EventStatus.PROCESSED:
                raise ValidationException(
                    "processed timestamp requires status processed", field="processed"
                )
            if self.locked is not None:
                raise ValidationException(
                    "A processed event cannot hold a lock", field="locked"
                )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def handler_key(self) -> tuple[ObjectType, EventType]:
        return (self.object_type, self.type)

    def is_claimable(self, now: datetime, visibility_timeout: timedelta) -> bool:
        """Queued and either unlocked or holding a lock older than the timeout."""
        if self.status is not EventStatus.QUEUED:
            return False
        return self.locked is None or self.locked < now - visibility_timeout

    def is_locked_by(self, lock_name: str) -> bool:
        return self.locked is not None and self.lock_name == lock_name

    def with_lock(self, lock_name: str, now: datetime) -> "EventEntity":
        """Return the event locked by `lock_name` at `now`."""
        return replace(self, locked=now, lock_name=lock_name)

    def after_success(self, now: datetime) -> "EventEntity":
        """Return the terminal PROCESSED state: processed stamped, lock cleared."""
        return replace(
            self,
            status=EventStatus.PROCESSED,
            processed=now,
            last_processed=now,
            locked=None,
            lock_name=None,
        )

    def after_failure(self, now: datetime, max_processing_attempts: int) -> "EventEntity":
        """Return the state after a failed attempt.

        The attempt counter is incremented exactly once. The event stays
        QUEUED while the attempts made before this one are below
        `max_processing_attempts`, otherwise it becomes FAILED.
        """
        status = (
            EventStatus.QUEUED
            if self.processing_attempts < max_processing_attempts
            else EventStatus.FAILED
        )
        return replace(
            self,
            status=status,
            processing_attempts=self.processing_attempts + 1,
            last_processed=now,
            locked=None,
            lock_name=None,
        )
