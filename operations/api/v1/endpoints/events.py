"""Event queue inspection endpoints (read-only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from operations.api.v1.dependencies import (
    get_event_queue_report_use_case,
    get_event_repo,
    get_tenant_id,
)
from operations.application.use_cases.events.get_event_queue_report import (
    GetEventQueueReportUseCase,
)
from operations.domain.enums import ObjectType
from operations.infrastructure.persistence.repositories import EventRepository
from operations.schemas.event import EventQueueReportResponse, EventResponse

router = APIRouter()


@router.get("", response_model=list[EventResponse])
async def list_events_for_object(
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    event_repo: Annotated[EventRepository, Depends(get_event_repo)],
    object_type: ObjectType,
    object_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """List events for one object, oldest first."""
    events = await event_repo.list_for_object(
        tenant_id, object_type, object_id, skip=skip, limit=limit
    )
    return [EventResponse.model_validate(e) for e in events]


@router.get("/report", response_model=EventQueueReportResponse)
async def get_event_queue_report(
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    use_case: Annotated[
        GetEventQueueReportUseCase, Depends(get_event_queue_report_use_case)
    ],
    failed_limit: int = Query(20, ge=0, le=200),
):
    """Event counts by status and the most recent dead letters."""
    report = await use_case.execute(tenant_id, failed_limit=failed_limit)
    return EventQueueReportResponse.model_validate(report)


@router.get("/failed", response_model=list[EventResponse])
async def list_failed_events(
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    event_repo: Annotated[EventRepository, Depends(get_event_repo)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """Dead-lettered events, most recently attempted first."""
    events = await event_repo.list_failed(tenant_id, skip=skip, limit=limit)
    return [EventResponse.model_validate(e) for e in events]


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    event_repo: Annotated[EventRepository, Depends(get_event_repo)],
):
    """Get event by ID (tenant-scoped)."""
    event = await event_repo.get_by_id(event_id, tenant_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return EventResponse.model_validate(event)
