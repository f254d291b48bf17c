from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Message:
    id: int
    request_id: int
    sender_id: int
    text: str
    created_at: datetime
    sender_name: str | None = None
