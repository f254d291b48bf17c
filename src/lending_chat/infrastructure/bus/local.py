from __future__ import annotations

from typing import Any

from lending_chat.infrastructure.ws.manager import ConnectionManager


class LocalChannelPublisher:
    """Implements application.ports.bus.ChannelPublisher for a single instance."""

    def __init__(self, manager: ConnectionManager) -> None:
        self._manager = manager

    async def publish(self, request_id: int, event_type: str, data: dict[str, Any]) -> None:
        await self._manager.broadcast_to_request(request_id, event_type, data)
