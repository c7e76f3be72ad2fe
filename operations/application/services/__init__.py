"""Application services: document status machine, requirement resolution and event dispatch."""

from operations.application.services.document_status_machine import DocumentStatusMachine
from operations.application.services.event_dispatch import HandlerContext, HandlerRegistry
from operations.application.services.requirement_resolver import (
    RequirementResolver,
    resolve_requirements,
)
from operations.application.services.workflow_engine_registry import WorkflowEngineRegistry

__all__ = [
    "DocumentStatusMachine",
    "HandlerContext",
    "HandlerRegistry",
    "RequirementResolver",
    "WorkflowEngineRegistry",
    "resolve_requirements",
]
