"""Event ORM model. Queue of domain facts; rows are never deleted."""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from operations.domain.enums import EventStatus, EventType, ObjectType
from operations.infrastructure.persistence.database import Base
from operations.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    status_check,
)


class Event(MultiTenantModel, Base):
    """Queued event. Table: operations_events.

    locked/lock_name are the claim lease; processed is stamped only on success.
    """

    __tablename__ = "operations_events"

    object_type: Mapped[str] = mapped_column(String, nullable=False)
    object_id: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)
    occurred: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    actor: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=EventStatus.QUEUED.value,
        server_default=sa.text("'queued'"),
    )
    processing_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    locked: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    lock_name: Mapped[str | None] = mapped_column(String, nullable=True)
    last_processed: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    processed: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_operations_events_status_occurred", "status", "occurred", "id"),
        Index("ix_operations_events_object", "tenant_id", "object_type", "object_id"),
        Index("ix_operations_events_lock_name", "lock_name"),
        status_check("status", EventStatus.values(), "operations_events_status_check"),
        status_check(
            "object_type", ObjectType.values(), "operations_events_object_type_check"
        ),
        status_check("type", EventType.values(), "operations_events_type_check"),
        CheckConstraint(
            "processing_attempts >= 0", name="operations_events_attempts_check"
        ),
        CheckConstraint(
            "(locked IS NULL) = (lock_name IS NULL)",
            name="operations_events_lock_pair_check",
        ),
        CheckConstraint(
            "processed IS NULL OR (status = 'processed' AND locked IS NULL)",
            name="operations_events_processed_check",
        ),
    )
