"""FastAPI dependencies for the operator API (composition root).

Endpoints receive repositories and use cases from here; none of them build
their own. The tenant header is resolved before the session is opened so
the session can scope itself to the tenant.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from operations.application.services.requirement_resolver import RequirementResolver
from operations.application.use_cases.events.get_event_queue_report import (
    GetEventQueueReportUseCase,
)
from operations.core.config import get_settings
from operations.core.tenant_context import is_valid_tenant_id_format, set_tenant_id
from operations.infrastructure.persistence.database import get_db
from operations.infrastructure.persistence.repositories import (
    EventRepository,
    RequirementRuleRepository,
    WorkflowDocumentRepository,
    WorkflowRepository,
)


async def get_tenant_id(request: Request) -> str:
    """Resolve tenant ID from header and bind it to the tenant context."""
    name = get_settings().tenant_header_name
    value = request.headers.get(name)
    if not value:
        raise HTTPException(
            status_code=400,
            detail=f"Missing required header: {name}",
        )
    if not is_valid_tenant_id_format(value):
        raise HTTPException(
            status_code=400,
            detail="Invalid tenant ID format (use alphanumeric, hyphen, underscore; max 64 characters)",
        )
    set_tenant_id(value)
    return value


async def get_tenant_db(
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AsyncSession:
    """Read session opened after the tenant context is set."""
    return db


async def get_event_repo(
    db: Annotated[AsyncSession, Depends(get_tenant_db)],
) -> EventRepository:
    return EventRepository(db)


async def get_workflow_repo(
    db: Annotated[AsyncSession, Depends(get_tenant_db)],
) -> WorkflowRepository:
    return WorkflowRepository(db)


async def get_event_queue_report_use_case(
    event_repo: Annotated[EventRepository, Depends(get_event_repo)],
) -> GetEventQueueReportUseCase:
    return GetEventQueueReportUseCase(event_repo)


async def get_requirement_resolver(
    db: Annotated[AsyncSession, Depends(get_tenant_db)],
) -> RequirementResolver:
    """Resolver over the workflow document and requirement rule repositories."""
    return RequirementResolver(
        rule_repo=RequirementRuleRepository(db),
        document_repo=WorkflowDocumentRepository(db),
    )
