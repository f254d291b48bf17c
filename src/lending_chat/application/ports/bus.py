from __future__ import annotations

from typing import Any, Protocol


class ChannelPublisher(Protocol):
    async def publish(self, request_id: int, event_type: str, data: dict[str, Any]) -> None:
        """Deliver an event to every connection subscribed to the request's channel."""
        ...
