"""Cross-instance fan-out over Redis Pub/Sub.

Every instance publishes committed chat events to one channel and runs a
subscriber that hands each event to its local connection manager.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError

from lending_chat.infrastructure.bus.serializer import deserialize_event, serialize_event

logger = logging.getLogger(__name__)


class RedisPubSubPublisher:
    """Implements application.ports.bus.ChannelPublisher across instances."""

    def __init__(self, redis: aioredis.Redis, channel: str) -> None:
        self._redis = redis
        self._channel = channel

    async def publish(self, request_id: int, event_type: str, data: dict[str, Any]) -> None:
        raw = serialize_event(event_type, request_id, data)
        receivers = await self._redis.publish(self._channel, raw)
        logger.debug("Published %s for request %d to %s instance(s)", event_type, request_id, receivers)


OnEventCallback = Callable[[str, int, dict[str, Any]], Coroutine[Any, Any, None]]


class RedisPubSubSubscriber:
    """Background task: channel -> callback, resubscribing after connection loss."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnEventCallback,
        *,
        retry_delay: float = 1.0,
        max_retry_delay: float = 30.0,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._retry_delay = retry_delay
        self._max_retry_delay = max_retry_delay
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name="redis-pubsub-subscriber")
        logger.info("Redis Pub/Sub subscriber started on channel=%s", self._channel)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Redis Pub/Sub subscriber stopped")

    async def _run(self) -> None:
        delay = self._retry_delay
        while True:
            try:
                await self._listen()
                return
            except RedisConnectionError:
                logger.warning(
                    "Lost Redis Pub/Sub connection, retrying in %.1fs", delay, exc_info=True,
                )
                await asyncio.sleep(delay)
                delay = min(delay * 2, self._max_retry_delay)

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                await self.dispatch(message["data"])
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()

    async def dispatch(self, raw: str | bytes) -> None:
        """Deliver one raw envelope; a bad envelope or failing callback only costs that event."""
        try:
            event_type, request_id, data = deserialize_event(raw)
        except (ValueError, KeyError, TypeError):
            logger.warning("Dropping malformed fan-out envelope: %r", raw[:200])
            return
        try:
            await self._callback(event_type, request_id, data)
        except Exception:
            logger.exception("Error dispatching %s for request %d", event_type, request_id)
