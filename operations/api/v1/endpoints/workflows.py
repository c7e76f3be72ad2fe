"""Workflow requirement endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import AwareDatetime

from operations.api.v1.dependencies import (
    get_requirement_resolver,
    get_tenant_id,
    get_workflow_repo,
)
from operations.application.services.requirement_resolver import RequirementResolver
from operations.infrastructure.persistence.repositories import WorkflowRepository
from operations.schemas.requirements import RequirementResolutionResponse
from operations.shared.utils.datetime import utc_now

router = APIRouter()


@router.get("/{workflow_id}/requirements", response_model=RequirementResolutionResponse)
async def get_workflow_requirements(
    workflow_id: str,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    workflow_repo: Annotated[WorkflowRepository, Depends(get_workflow_repo)],
    resolver: Annotated[RequirementResolver, Depends(get_requirement_resolver)],
    include_internal: bool = Query(True),
    at: AwareDatetime | None = Query(None, description="Evaluate at this time (default now)"),
):
    """Satisfied and outstanding document requirements for a workflow.

    Set include_internal=false for the external (client-facing) view.
    """
    workflow = await workflow_repo.get_by_id(workflow_id, tenant_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    now: datetime = at or utc_now()
    resolution = await resolver.resolve(
        workflow.definition_id, workflow.definition_version, workflow.id, now=now
    )
    if not include_internal:
        resolution = resolution.without_internal()
    return RequirementResolutionResponse.model_validate(resolution)
