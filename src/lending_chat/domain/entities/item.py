from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Item:
    id: int
    owner_id: int
    title: str
    status: str
    created_at: datetime
