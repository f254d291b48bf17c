from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lending_chat.domain.entities.message import Message
from lending_chat.infrastructure.db.mappers import message as mapper
from lending_chat.infrastructure.db.models.message import MessageModel
from lending_chat.infrastructure.db.models.user import UserModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_request(
        self,
        request_id: int,
        *,
        after_id: int | None = None,
        limit: int = 100,
    ) -> list[Message]:
        stmt = (
            select(MessageModel, UserModel.name)
            .join(UserModel, UserModel.id == MessageModel.sender_id)
            .where(MessageModel.request_id == request_id)
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
            .limit(limit)
        )
        if after_id is not None:
            stmt = stmt.where(MessageModel.id > after_id)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m, sender_name=name) for m, name in result.all()]

    async def last_created_at(self, request_id: int) -> datetime | None:
        stmt = select(func.max(MessageModel.created_at)).where(
            MessageModel.request_id == request_id
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def append(
        self,
        request_id: int,
        sender_id: int,
        text: str,
        created_at: datetime,
    ) -> Message:
        model = MessageModel(
            request_id=request_id,
            sender_id=sender_id,
            text=text,
            created_at=created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)
