from __future__ import annotations

from datetime import datetime
from typing import Protocol

from lending_chat.domain.entities.request import Request


class RequestReader(Protocol):
    async def get_by_id(self, request_id: int) -> Request | None: ...

    async def get_open_for_item(self, item_id: int) -> Request | None:
        """Return the PENDING or APPROVED request for the item, if any."""
        ...

    async def list_for_subject(self, subject_id: int) -> list[Request]:
        """Requests where the subject is the requester or the item owner, newest first."""
        ...


class RequestWriter(Protocol):
    async def get_for_update(self, request_id: int) -> Request | None:
        """Load the request and hold its row lock until the transaction ends."""
        ...

    async def create(
        self, item_id: int, requester_id: int, status: str, created_at: datetime,
    ) -> Request: ...

    async def update_status(
        self,
        request_id: int,
        status: str,
        *,
        approved_at: datetime | None = None,
        closed_at: datetime | None = None,
    ) -> Request: ...
