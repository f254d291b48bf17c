from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class MessageResponse(BaseModel):
    id: int
    request_id: int
    sender_id: int
    sender_name: str | None
    text: str
    created_at: datetime

    model_config = {"from_attributes": True}
