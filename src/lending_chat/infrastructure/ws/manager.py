"""In-process WebSocket connection manager."""
from __future__ import annotations

import logging
from typing import Any, Protocol

from lending_chat.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class FrameSink(Protocol):
    async def send_text(self, data: str) -> None: ...


class ConnectionManager:
    """Tracks live connections and the request channels they are subscribed to."""

    def __init__(self) -> None:
        self._connections: dict[str, FrameSink] = {}
        self._subscriptions: dict[int, set[str]] = {}

    def register(self, connection_id: str, ws: FrameSink) -> None:
        self._connections[connection_id] = ws
        logger.debug("WS registered: %s (total=%d)", connection_id, len(self._connections))

    def disconnect(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)
        for request_id in list(self._subscriptions):
            self.unsubscribe(connection_id, request_id)
        logger.debug("WS disconnected: %s", connection_id)

    def subscribe(self, connection_id: str, request_id: int) -> None:
        self._subscriptions.setdefault(request_id, set()).add(connection_id)

    def unsubscribe(self, connection_id: str, request_id: int) -> None:
        subs = self._subscriptions.get(request_id)
        if subs is None:
            return
        subs.discard(connection_id)
        if not subs:
            del self._subscriptions[request_id]

    def subscribers(self, request_id: int) -> set[str]:
        return set(self._subscriptions.get(request_id, ()))

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._connections

    async def broadcast_to_request(
        self,
        request_id: int,
        event_type: str,
        data: dict[str, Any],
    ) -> None:
        """Send a frame to every connection subscribed to the request's channel.

        A failing connection is dropped; the others still get the frame.
        """
        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        dead: list[str] = []
        # Snapshot: subscriptions can change while we await sends.
        for connection_id in self.subscribers(request_id):
            ws = self._connections.get(connection_id)
            if ws is None:
                continue
            try:
                await ws.send_text(raw)
            except Exception:
                logger.warning(
                    "Delivery to %s on request %d failed", connection_id, request_id,
                    exc_info=True,
                )
                dead.append(connection_id)
        for connection_id in dead:
            self.disconnect(connection_id)
