"""Fan-out of persisted chat events to the request's channel."""
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any

from lending_chat.application.ports.bus import ChannelPublisher
from lending_chat.domain.entities.message import Message
from lending_chat.domain.entities.request import Request
from lending_chat.domain.events.message_created import MessageCreated
from lending_chat.domain.events.request_status_changed import RequestStatusChanged

logger = logging.getLogger(__name__)

MESSAGE_CREATED = "message.created"
REQUEST_STATUS_CHANGED = "request.status_changed"


def _to_payload(event: MessageCreated | RequestStatusChanged) -> dict[str, Any]:
    data = asdict(event)
    return {k: v.isoformat() if isinstance(v, datetime) else v for k, v in data.items()}


def message_payload(message: Message) -> dict[str, Any]:
    return _to_payload(MessageCreated.from_message(message))


class MessageRelay:
    """Publishes already-committed events; a failed delivery never undoes the write."""

    def __init__(self, publisher: ChannelPublisher) -> None:
        self._publisher = publisher

    async def message_created(self, message: Message) -> None:
        await self._publish(message.request_id, MESSAGE_CREATED, message_payload(message))

    async def request_status_changed(self, request: Request) -> None:
        event = RequestStatusChanged.from_request(request)
        await self._publish(event.request_id, REQUEST_STATUS_CHANGED, _to_payload(event))

    async def _publish(self, request_id: int, event_type: str, data: dict[str, Any]) -> None:
        try:
            await self._publisher.publish(request_id, event_type, data)
        except Exception:
            logger.exception("Fan-out of %s for request %d failed", event_type, request_id)
