"""
Shared persistence for the marketplace repositories.

Every write commits its own transaction on the request's session. A failed
write is rolled back before the error propagates, which keeps the session
usable for the error response and for outbox entries written afterwards.
"""

from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from rental_marketplace.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type, AsyncIterator
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Id-keyed access to one model; subclasses add the queries their service needs."""

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    @asynccontextmanager
    async def _transaction(self, description: str) -> AsyncIterator[None]:
        """
        Commit whatever the block wrote.

        Args:
            description: What the block does, e.g. "claim outbox entry <id>";
                logged when the block or the commit fails
        """
        try:
            yield
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to {description}: {type(e).__name__}: {e}")
            raise

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**obj_in)
        async with self._transaction(f"create {self.model.__name__}"):
            self.db.add(db_obj)

        await self.db.refresh(db_obj)
        logger.debug(f"Created {self.model.__name__} {db_obj.id}")
        return db_obj

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update(self, id: uuid.UUID, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Assign obj_in onto the stored record and commit.

        Values go through the loaded instance, so objects already held by the
        session (a booking's property, a review's author) see the change.

        Returns:
            The refreshed record, None if no record has this id. An empty
            obj_in returns the record untouched.
        """
        db_obj = await self.get_by_id(id)
        if db_obj is None or not obj_in:
            return db_obj

        async with self._transaction(f"update {self.model.__name__} {id}"):
            for field, value in obj_in.items():
                setattr(db_obj, field, value)

        await self.db.refresh(db_obj)
        logger.debug(f"Updated {self.model.__name__} {id}: {', '.join(obj_in)}")
        return db_obj

    async def delete(self, id: uuid.UUID) -> bool:
        """Delete by id; dependent rows go with it through ON DELETE CASCADE."""
        async with self._transaction(f"delete {self.model.__name__} {id}"):
            result = await self.db.execute(delete(self.model).where(self.model.id == id))

        return result.rowcount > 0

    async def exists(self, id: uuid.UUID) -> bool:
        result = await self.db.execute(select(self.model.id).where(self.model.id == id).limit(1))
        return result.first() is not None
