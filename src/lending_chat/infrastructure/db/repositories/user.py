from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from lending_chat.application.repositories.user import UserRecord
from lending_chat.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: int) -> UserRecord | None:
        model = await self._session.get(UserModel, user_id)
        if model is None:
            return None
        return UserRecord(id=model.id, name=model.name, email=model.email)
