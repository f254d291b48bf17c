from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Request:
    id: int
    item_id: int
    requester_id: int
    owner_id: int
    status: str
    created_at: datetime
    approved_at: datetime | None = None
    closed_at: datetime | None = None
    item_title: str | None = None
    requester_name: str | None = None
    owner_name: str | None = None

    def is_participant(self, subject_id: int) -> bool:
        return subject_id in (self.requester_id, self.owner_id)
