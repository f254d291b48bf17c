from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class TransitionRequestBody(BaseModel):
    status: Literal["APPROVED", "REJECTED", "RETURNED"]


class RequestResponse(BaseModel):
    id: int
    item_id: int
    requester_id: int
    owner_id: int
    status: str
    created_at: datetime
    approved_at: datetime | None
    closed_at: datetime | None
    item_title: str | None = None
    requester_name: str | None = None
    owner_name: str | None = None

    model_config = {"from_attributes": True}
