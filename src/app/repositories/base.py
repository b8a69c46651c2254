"""Base repository with generic data-access operations."""
from typing import Generic, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Generic repository for any model.

    Writes are staged and flushed but never committed here; the calling
    service owns the transaction and decides when to commit or roll back.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: int) -> T | None:
        """Get a single record by ID."""
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def add(self, obj: T) -> T:
        """Stage a new record and flush it so generated keys are available."""
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def update(self, obj: T, data: dict) -> T:
        """Apply field values to a loaded record and flush."""
        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)
        await self.db.flush()
        return obj
