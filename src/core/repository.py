from collections.abc import Sequence
from typing import Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    def __init__(self, db: AsyncSession, model: type[ModelType]):
        self.db: AsyncSession = db
        self.model = model

    async def get_latest(self, limit: int = 20) -> Sequence[ModelType]:
        statement = select(self.model).order_by(self.model.created_at.desc()).limit(limit)
        result = await self.db.scalars(statement)
        return result.all()

    async def create(self, obj_in: ModelType) -> ModelType:
        self.db.add(obj_in)
        await self.db.commit()
        await self.db.refresh(obj_in)
        return obj_in
