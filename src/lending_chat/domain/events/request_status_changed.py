from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from lending_chat.domain.entities.request import Request


@dataclass(frozen=True, slots=True)
class RequestStatusChanged:
    request_id: int
    item_id: int
    status: str
    approved_at: datetime | None
    closed_at: datetime | None

    @classmethod
    def from_request(cls, request: Request) -> RequestStatusChanged:
        return cls(
            request_id=request.id,
            item_id=request.item_id,
            status=request.status,
            approved_at=request.approved_at,
            closed_at=request.closed_at,
        )
