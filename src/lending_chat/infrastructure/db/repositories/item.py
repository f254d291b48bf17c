from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lending_chat.domain.entities.item import Item
from lending_chat.infrastructure.db.mappers import item as mapper
from lending_chat.infrastructure.db.models.item import ItemModel


class ItemWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_update(self, item_id: int) -> Item | None:
        stmt = (
            select(ItemModel)
            .where(ItemModel.id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def create(
        self,
        owner_id: int,
        title: str,
        status: str,
        created_at: datetime,
    ) -> Item:
        model = ItemModel(owner_id=owner_id, title=title, status=status, created_at=created_at)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def set_status(self, item_id: int, status: str) -> None:
        stmt = (
            update(ItemModel)
            .where(ItemModel.id == item_id)
            .values(status=status)
        )
        await self._session.execute(stmt)
