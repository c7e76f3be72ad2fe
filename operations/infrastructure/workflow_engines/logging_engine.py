"""Built-in workflow engine that records decisions in the log.

Used for workflow definitions with engine_id "internal", where no external
engine drives the workflow. Notifications are de-duplicated by event id so
redelivered events are not recorded twice.
"""

from collections import OrderedDict
from dataclasses import dataclass

from operations.application.dtos.requirements import RequirementResolution
from operations.domain.entities.event import EventEntity
from operations.domain.entities.workflow import WorkflowEntity
from operations.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ENGINE_ID = "internal"
_MAX_SEEN_EVENTS = 10_000


@dataclass(frozen=True)
class EngineDecision:
    """What the engine concluded for one event."""

    event_id: str
    workflow_id: str
    can_proceed: bool
    outstanding: tuple[str, ...]


class LoggingWorkflowEngine:
    """IWorkflowEngine that logs and keeps the latest decisions in memory."""

    engine_id = INTERNAL_ENGINE_ID

    def __init__(self, max_seen_events: int = _MAX_SEEN_EVENTS) -> None:
        self._max_seen_events = max_seen_events
        self._seen: OrderedDict[tuple[str, str], None] = OrderedDict()
        self.decisions: list[EngineDecision] = []

    def _first_delivery(self, kind: str, event_id: str) -> bool:
        key = (kind, event_id)
        if key in self._seen:
            return False
        self._seen[key] = None
        while len(self._seen) > self._max_seen_events:
            self._seen.popitem(last=False)
        return True

    async def start_workflow(self, workflow: WorkflowEntity, event: EventEntity) -> str | None:
        instance_id = f"{INTERNAL_ENGINE_ID}-{workflow.id}"
        if self._first_delivery("start", event.id):
            logger.info("Started workflow %s as %s", workflow.id, instance_id)
        return instance_id

    async def requirements_changed(
        self,
        workflow: WorkflowEntity,
        resolution: RequirementResolution,
        event: EventEntity,
    ) -> None:
        if not self._first_delivery("requirements", event.id):
            logger.debug(
                "Ignoring redelivered event %s for workflow %s", event.id, workflow.id
            )
            return
        decision = EngineDecision(
            event_id=event.id,
            workflow_id=workflow.id,
            can_proceed=resolution.can_proceed,
            outstanding=tuple(i.document_definition_id for i in resolution.outstanding),
        )
        self.decisions.append(decision)
        if len(self.decisions) > self._max_seen_events:
            del self.decisions[0]
        if decision.can_proceed:
            logger.info("Workflow %s has all required documents", workflow.id)
        else:
            logger.info(
                "Workflow %s is waiting on: %s",
                workflow.id,
                ", ".join(decision.outstanding),
            )
