from __future__ import annotations

from datetime import datetime
from typing import Protocol

from lending_chat.domain.entities.item import Item


class ItemWriter(Protocol):
    async def get_for_update(self, item_id: int) -> Item | None:
        """Load the item and hold its row lock until the transaction ends."""
        ...

    async def create(
        self, owner_id: int, title: str, status: str, created_at: datetime,
    ) -> Item: ...

    async def set_status(self, item_id: int, status: str) -> None: ...
