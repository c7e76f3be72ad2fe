"""Application DTOs."""

from operations.application.dtos.event import EventQueueReport
from operations.application.dtos.requirements import (
    RequirementConflict,
    RequirementItem,
    RequirementResolution,
)

__all__ = [
    "EventQueueReport",
    "RequirementConflict",
    "RequirementItem",
    "RequirementResolution",
]
