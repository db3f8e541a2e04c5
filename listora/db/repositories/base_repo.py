"""
Generic async CRUD repository base class.

Provides the data access methods every entity-specific repository
inherits.
"""

import uuid
from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from listora.core.exceptions import PersistenceError
from listora.db.models import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Subclasses specify the model class and add entity-specific queries.
    Queries that return seller-owned data must be scoped by user_id.
    """

    def __init__(self, session: AsyncSession, model: type[ModelType]):
        self.session = session
        self.model = model

    async def get_by_id(self, record_id: uuid.UUID) -> ModelType | None:
        return await self.session.get(self.model, record_id)

    async def add(self, instance: ModelType) -> ModelType:
        """
        Persist an instance built by a mapper.

        Raises:
            PersistenceError: The flush failed; the session needs a rollback.
        """
        self.session.add(instance)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Could not save {self.model.__name__}",
                details={"error": f"{type(e).__name__}: {e}"},
            ) from e
        return instance

    async def create(self, **kwargs) -> ModelType:
        return await self.add(self.model(**kwargs))

    async def update(self, record_id: uuid.UUID, **kwargs) -> ModelType | None:
        instance = await self.get_by_id(record_id)
        if instance is None:
            return None
        for key, value in kwargs.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        await self.session.flush()
        return instance

    async def count(self, user_id: uuid.UUID | None = None) -> int:
        stmt = select(func.count()).select_from(self.model)
        if user_id is not None and hasattr(self.model, "user_id"):
            stmt = stmt.where(self.model.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()
