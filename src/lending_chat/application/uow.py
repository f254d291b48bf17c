from __future__ import annotations

from typing import Protocol, Self

from lending_chat.application.repositories.item import ItemWriter
from lending_chat.application.repositories.message import MessageReader, MessageWriter
from lending_chat.application.repositories.request import RequestReader, RequestWriter
from lending_chat.application.repositories.user import UserReader


class UnitOfWork(Protocol):
    users: UserReader
    items_w: ItemWriter
    requests: RequestReader
    requests_w: RequestWriter
    messages: MessageReader
    messages_w: MessageWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...

    async def __aenter__(self) -> Self: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Roll back when the block raised."""
        ...
