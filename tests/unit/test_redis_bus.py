from __future__ import annotations

import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from lending_chat.infrastructure.bus.redis_pubsub import (
    RedisPubSubPublisher,
    RedisPubSubSubscriber,
)
from lending_chat.services.message_relay import MESSAGE_CREATED


class FakePubSub:
    def __init__(self, published: list[str], fail_first: bool = False) -> None:
        self._published = published
        self._fail_first = fail_first
        self.closed = False

    async def subscribe(self, channel: str) -> None:
        if self._fail_first:
            self._fail_first = False
            raise RedisConnectionError("connection refused")

    async def listen(self):
        yield {"type": "subscribe", "data": 1}
        for raw in self._published:
            yield {"type": "message", "data": raw}

    async def unsubscribe(self, channel: str) -> None:
        pass

    async def aclose(self) -> None:
        self.closed = True


class FakeRedis:
    def __init__(self, *, fail_first: bool = False) -> None:
        self.published: list[tuple[str, str]] = []
        self._fail_first = fail_first

    async def publish(self, channel: str, raw: str) -> int:
        self.published.append((channel, raw))
        return 1

    def pubsub(self) -> FakePubSub:
        pubsub = FakePubSub([raw for _, raw in self.published], self._fail_first)
        self._fail_first = False
        return pubsub


@pytest.mark.asyncio
async def test_publish_then_dispatch_round_trip():
    redis = FakeRedis()
    received: list[tuple[str, int, dict]] = []

    async def on_event(event_type, request_id, data):
        received.append((event_type, request_id, data))

    await RedisPubSubPublisher(redis, "fanout").publish(7, MESSAGE_CREATED, {"text": "hi"})
    subscriber = RedisPubSubSubscriber(redis, "fanout", on_event)
    await subscriber.start()
    await asyncio.wait_for(subscriber._task, timeout=1)

    assert redis.published[0][0] == "fanout"
    assert received == [(MESSAGE_CREATED, 7, {"text": "hi"})]


@pytest.mark.asyncio
async def test_subscriber_retries_after_connection_loss():
    redis = FakeRedis(fail_first=True)
    received: list[int] = []

    async def on_event(event_type, request_id, data):
        received.append(request_id)

    await RedisPubSubPublisher(redis, "fanout").publish(3, MESSAGE_CREATED, {})
    subscriber = RedisPubSubSubscriber(redis, "fanout", on_event, retry_delay=0.01)
    await subscriber.start()
    await asyncio.wait_for(subscriber._task, timeout=1)

    assert received == [3]


@pytest.mark.asyncio
async def test_bad_envelope_and_failing_callback_are_contained(caplog):
    calls: list[int] = []

    async def on_event(event_type, request_id, data):
        calls.append(request_id)
        raise RuntimeError("manager exploded")

    subscriber = RedisPubSubSubscriber(FakeRedis(), "fanout", on_event)

    await subscriber.dispatch("{not json")
    await subscriber.dispatch('{"event": "message.created", "request_id": 1, "data": {}}')

    assert calls == [1]
    assert "Dropping malformed fan-out envelope" in caplog.text
    assert "Error dispatching message.created for request 1" in caplog.text


@pytest.mark.asyncio
async def test_stop_cancels_running_listener():
    class BlockingPubSub(FakePubSub):
        async def listen(self):
            await asyncio.Event().wait()
            yield {}

    class BlockingRedis(FakeRedis):
        def pubsub(self):
            self.last = BlockingPubSub([])
            return self.last

    redis = BlockingRedis()

    async def on_event(event_type, request_id, data):
        pass

    subscriber = RedisPubSubSubscriber(redis, "fanout", on_event)
    await subscriber.start()
    await asyncio.sleep(0)
    await subscriber.stop()

    assert redis.last.closed is True
