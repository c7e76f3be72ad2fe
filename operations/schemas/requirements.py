"""Workflow document requirement API schemas."""

from pydantic import AwareDatetime, BaseModel, ConfigDict

from operations.domain.enums import RequirementReason, RequirementState


class RequirementItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_definition_id: str
    state: RequirementState
    reason: RequirementReason
    required: bool
    internal: bool
    document_record_id: str | None = None
    expires: AwareDatetime | None = None


class RequirementConflictResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_definition_id: str
    kept_record_id: str
    superseded_record_ids: list[str]


class RequirementResolutionResponse(BaseModel):
    """Resolution of a workflow's document requirements at a point in time."""

    model_config = ConfigDict(from_attributes=True)

    workflow_id: str
    can_proceed: bool
    satisfied: list[RequirementItemResponse]
    outstanding: list[RequirementItemResponse]
    optional_outstanding: list[RequirementItemResponse]
    conflicts: list[RequirementConflictResponse]
