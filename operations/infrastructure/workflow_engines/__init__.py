"""Workflow engine implementations and the default registry."""

from operations.application.services.workflow_engine_registry import WorkflowEngineRegistry
from operations.infrastructure.workflow_engines.logging_engine import (
    INTERNAL_ENGINE_ID,
    LoggingWorkflowEngine,
)


def build_workflow_engine_registry() -> WorkflowEngineRegistry:
    """Registry with every engine this deployment ships."""
    return WorkflowEngineRegistry([LoggingWorkflowEngine()])


__all__ = [
    "INTERNAL_ENGINE_ID",
    "LoggingWorkflowEngine",
    "build_workflow_engine_registry",
]
