from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from lending_chat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessageCreated:
    message_id: int
    request_id: int
    sender_id: int
    sender_name: str | None
    text: str
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> MessageCreated:
        return cls(
            message_id=message.id,
            request_id=message.request_id,
            sender_id=message.sender_id,
            sender_name=message.sender_name,
            text=message.text,
            created_at=message.created_at,
        )
