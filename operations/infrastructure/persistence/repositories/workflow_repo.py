"""Workflow and workflow definition repositories."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from operations.domain.entities.workflow import WorkflowDefinitionEntity, WorkflowEntity
from operations.domain.enums import WorkflowStatus
from operations.domain.exceptions import ResourceNotFoundException
from operations.infrastructure.persistence.models.workflow import (
    Workflow,
    WorkflowDefinition,
)
from operations.infrastructure.persistence.repositories.base import BaseRepository


def _workflow_to_entity(w: Workflow) -> WorkflowEntity:
    return WorkflowEntity(
        id=w.id,
        tenant_id=w.tenant_id,
        definition_id=w.definition_id,
        definition_version=w.definition_version,
        status=WorkflowStatus(w.status),
        engine_instance_id=w.engine_instance_id,
    )


def _definition_to_entity(d: WorkflowDefinition) -> WorkflowDefinitionEntity:
    return WorkflowDefinitionEntity(
        id=d.id, version=d.version, name=d.name, engine_id=d.engine_id
    )


class WorkflowRepository(BaseRepository[Workflow]):
    """Workflow instances. Status is owned by the workflow engine."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Workflow)

    async def get_by_id(
        self, workflow_id: str, tenant_id: str | None = None
    ) -> WorkflowEntity | None:
        q = select(Workflow).where(Workflow.id == workflow_id)
        if tenant_id is not None:
            q = q.where(Workflow.tenant_id == tenant_id)
        result = await self.db.execute(q)
        row = result.scalar_one_or_none()
        return _workflow_to_entity(row) if row else None

    async def get_for_update(self, workflow_id: str) -> WorkflowEntity | None:
        """Load the workflow holding a row lock until the transaction ends.

        Serializes handlers that recompute requirements for the same workflow.
        Dialects without FOR UPDATE (SQLite) serialize writers at the database level.
        """
        result = await self.db.execute(
            select(Workflow).where(Workflow.id == workflow_id).with_for_update()
        )
        row = result.scalar_one_or_none()
        return _workflow_to_entity(row) if row else None

    async def add(self, workflow: WorkflowEntity) -> WorkflowEntity:
        row = Workflow(
            id=workflow.id,
            tenant_id=workflow.tenant_id,
            definition_id=workflow.definition_id,
            definition_version=workflow.definition_version,
            status=workflow.status.value,
            engine_instance_id=workflow.engine_instance_id,
        )
        created = await self._insert(row)
        return _workflow_to_entity(created)

    async def set_engine_instance(self, workflow_id: str, engine_instance_id: str) -> None:
        """Record the engine-side instance id once the engine has started the workflow."""
        row = await self._get_model(workflow_id)
        if row is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        row.engine_instance_id = engine_instance_id
        await self.db.flush()


class WorkflowDefinitionRepository:
    """Workflow definitions keyed by (id, version)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, definition_id: str, version: int) -> WorkflowDefinitionEntity | None:
        row = await self.db.get(WorkflowDefinition, (definition_id, version))
        return _definition_to_entity(row) if row else None

    async def add(self, definition: WorkflowDefinitionEntity) -> WorkflowDefinitionEntity:
        row = WorkflowDefinition(
            id=definition.id,
            version=definition.version,
            name=definition.name,
            engine_id=definition.engine_id,
        )
        self.db.add(row)
        await self.db.flush()
        return _definition_to_entity(row)

    async def list_engine_ids(self) -> set[str]:
        """Distinct engine ids referenced by stored definitions."""
        result = await self.db.execute(select(WorkflowDefinition.engine_id).distinct())
        return set(result.scalars().all())
