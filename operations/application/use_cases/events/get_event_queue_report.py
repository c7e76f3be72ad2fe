"""Operator report over the event queue: counts by status and recent dead letters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from operations.application.dtos.event import EventQueueReport

if TYPE_CHECKING:
    from operations.application.interfaces.repositories import IEventRepository

REPORT_RECENT_FAILED_LIMIT = 20


class GetEventQueueReportUseCase:
    """Builds the queue report for one tenant."""

    def __init__(self, event_repo: IEventRepository) -> None:
        self._event_repo = event_repo

    async def execute(
        self, tenant_id: str, failed_limit: int = REPORT_RECENT_FAILED_LIMIT
    ) -> EventQueueReport:
        counts = await self._event_repo.count_by_status(tenant_id)
        recent_failed = await self._event_repo.list_failed(
            tenant_id, skip=0, limit=failed_limit
        )
        return EventQueueReport(
            tenant_id=tenant_id, counts=counts, recent_failed=recent_failed
        )
