from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
import uuid

from sqlalchemy import func
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from storefront.errors import NotFound, StorefrontException

ModelT = TypeVar("ModelT", bound=SQLModel)


class Repository(Generic[ModelT]):
    """CRUD over one SQLModel table.

    Feature repositories hold one of these rather than subclassing it, and add
    their own domain finders next to it.

    Args:
        session (AsyncSession): Session every query runs in
        model (Type[ModelT]): Table model the repository is bound to
        not_found (Type[StorefrontException]): Raised by the ``*_or_404`` helpers
    """

    def __init__(self, session: AsyncSession, model: Type[ModelT], not_found: Type[StorefrontException] = NotFound):
        self.session = session
        self.model = model
        self.not_found = not_found

    def _where(self, criteria: Dict[str, Any]):
        return [getattr(self.model, field) == value for field, value in criteria.items()]

    async def create(self, data: Dict[str, Any]) -> ModelT:
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def get(self, uid: uuid.UUID) -> Optional[ModelT]:
        return await self.session.get(self.model, uid)

    async def get_or_404(self, uid: uuid.UUID) -> ModelT:
        entity = await self.get(uid)
        if entity is None:
            raise self.not_found()
        return entity

    async def find_one(self, **criteria) -> Optional[ModelT]:
        result = await self.session.exec(select(self.model).where(*self._where(criteria)))
        return result.first()

    async def find_all(self, **criteria) -> List[ModelT]:
        result = await self.session.exec(select(self.model).where(*self._where(criteria)))
        return list(result.all())

    async def update(self, uid: uuid.UUID, changes: Dict[str, Any]) -> ModelT:
        entity = await self.get_or_404(uid)
        for k, v in changes.items():
            setattr(entity, k, v)
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def delete(self, uid: uuid.UUID) -> None:
        entity = await self.get_or_404(uid)
        await self.session.delete(entity)
        await self.session.commit()

    async def count(self, **criteria) -> int:
        statement = select(func.count()).select_from(self.model).where(*self._where(criteria))
        result = await self.session.exec(statement)
        return result.one()

    async def exists(self, **criteria) -> bool:
        return await self.count(**criteria) > 0
