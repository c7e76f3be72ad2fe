"""Workflow engine registry: engine id -> statically registered implementation."""

from collections.abc import Iterable

from operations.application.interfaces.services import IWorkflowEngine
from operations.domain.exceptions import UnknownWorkflowEngineException, ValidationException


class WorkflowEngineRegistry:
    """Resolves workflow engines by id.

    Engines are registered once at startup. `validate` is called with the
    engine ids referenced by stored workflow definitions so that a definition
    pointing at an unknown engine stops the worker before it claims events.
    """

    def __init__(self, engines: Iterable[IWorkflowEngine] = ()) -> None:
        self._engines: dict[str, IWorkflowEngine] = {}
        for engine in engines:
            self.register(engine)

    def register(self, engine: IWorkflowEngine) -> None:
        if not engine.engine_id:
            raise ValidationException("Workflow engine id is required", field="engine_id")
        if engine.engine_id in self._engines:
            raise ValidationException(
                f"Workflow engine already registered: {engine.engine_id}",
                field="engine_id",
            )
        self._engines[engine.engine_id] = engine

    @property
    def engine_ids(self) -> frozenset[str]:
        return frozenset(self._engines)

    def get(self, engine_id: str) -> IWorkflowEngine:
        """Return the engine for engine_id. Raises UnknownWorkflowEngineException."""
        engine = self._engines.get(engine_id)
        if engine is None:
            raise UnknownWorkflowEngineException([engine_id])
        return engine

    def validate(self, engine_ids: Iterable[str]) -> None:
        """Raise UnknownWorkflowEngineException listing every unregistered id."""
        unknown = sorted(set(engine_ids) - self._engines.keys())
        if unknown:
            raise UnknownWorkflowEngineException(unknown)
