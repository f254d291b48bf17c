from __future__ import annotations

from lending_chat.domain.entities.message import Message
from lending_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel, sender_name: str | None = None) -> Message:
    return Message(
        id=model.id,
        request_id=model.request_id,
        sender_id=model.sender_id,
        text=model.text,
        created_at=model.created_at,
        sender_name=sender_name,
    )
