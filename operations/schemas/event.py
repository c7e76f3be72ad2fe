"""Event queue API schemas."""

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from operations.domain.enums import EventStatus, EventType, ObjectType


class EventResponse(BaseModel):
    """Event detail and list item."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    object_type: ObjectType
    object_id: str
    type: EventType
    occurred: AwareDatetime
    actor: str
    status: EventStatus
    processing_attempts: int
    locked: AwareDatetime | None = None
    lock_name: str | None = None
    last_processed: AwareDatetime | None = None
    processed: AwareDatetime | None = None


class EventQueueReportResponse(BaseModel):
    """Counts by status plus the most recent dead letters."""

    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    total: int
    counts: dict[str, int] = Field(..., description="Event count per status")
    recent_failed: list[EventResponse]
