"""Base repository: session plumbing shared by the concrete repositories."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from operations.infrastructure.persistence.database import Base


class BaseRepository[ModelType: Base]:
    """Base repository with model lookup and insert.

    Concrete repositories map ORM rows to domain entities; ORM instances
    never leave the persistence layer.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_model(self, entity_id: str) -> ModelType | None:
        """Return the ORM row for a single-column primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def _insert(self, obj: ModelType) -> ModelType:
        """Add and flush a new row so database defaults and constraints apply."""
        self.db.add(obj)
        await self.db.flush()
        return obj
