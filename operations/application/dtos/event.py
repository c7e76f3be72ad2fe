"""DTOs for the event queue operator report."""

from dataclasses import dataclass

from operations.domain.entities.event import EventEntity


@dataclass(frozen=True)
class EventQueueReport:
    """Event counts per status for a tenant, plus the most recent dead letters."""

    tenant_id: str
    counts: dict[str, int]
    recent_failed: list[EventEntity]

    @property
    def total(self) -> int:
        return sum(self.counts.values())
