from __future__ import annotations

from datetime import datetime
from typing import Protocol

from lending_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_for_request(
        self,
        request_id: int,
        *,
        after_id: int | None = None,
        limit: int = 100,
    ) -> list[Message]:
        """Messages in persisted order: created_at, then id."""
        ...

    async def last_created_at(self, request_id: int) -> datetime | None: ...


class MessageWriter(Protocol):
    async def append(
        self, request_id: int, sender_id: int, text: str, created_at: datetime,
    ) -> Message: ...
