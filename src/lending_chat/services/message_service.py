from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace

from lending_chat.application.dto.identity import Identity
from lending_chat.application.locks import request_key, resource_locks
from lending_chat.application.policies.permissions import (
    assert_can_send,
    assert_can_subscribe,
    assert_participant,
)
from lending_chat.application.ports.clock import Clock, SystemClock
from lending_chat.application.uow import UnitOfWork
from lending_chat.domain.entities.message import Message
from lending_chat.domain.entities.request import Request
from lending_chat.domain.value_objects.lifecycle import next_message_timestamp

logger = logging.getLogger(__name__)

_clock: Clock = SystemClock()


async def send_message(
    request_id: int,
    sender: Identity,
    text: str | None,
    uow: UnitOfWork,
    *,
    clock: Clock = _clock,
) -> Message:
    """Authorize and persist a chat message.

    The status check, the timestamp assignment and the commit all happen
    under the request's lock, so a concurrent transition away from APPROVED
    either lands before the check (and the send fails) or after the commit.
    """
    async with resource_locks.hold(request_key(request_id)), uow:
        request = await uow.requests_w.get_for_update(request_id)
        assert_can_send(sender, request, text)
        assert text is not None

        last = await uow.messages.last_created_at(request_id)
        created_at = next_message_timestamp(clock.now(), last)
        message = await uow.messages_w.append(
            request_id, sender.subject_id, text, created_at,
        )
        await uow.commit()

    logger.debug("Message %d stored on request %d", message.id, request_id)
    return replace(message, sender_name=sender.display_name)


async def open_subscription(
    request_id: int,
    identity: Identity,
    uow: UnitOfWork,
    register: Callable[[], None],
    *,
    on_snapshot: Callable[[Request, list[Message]], Awaitable[None]] | None = None,
    history_limit: int = 200,
) -> tuple[Request, list[Message]]:
    """Authorize a subscription, snapshot the history and register it.

    Everything runs under the request lock shared with send_message:
    ``on_snapshot`` delivers the history before ``register`` adds the live
    subscription, so no live message reaches the subscriber ahead of its
    snapshot, and any message committed later is delivered live. A message
    committed just before the lock can show up in both; clients dedupe by id.
    """
    async with resource_locks.hold(request_key(request_id)):
        request = await uow.requests.get_by_id(request_id)
        assert_can_subscribe(identity, request)
        assert request is not None
        history = await uow.messages.list_for_request(request_id, limit=history_limit)
        if on_snapshot is not None:
            await on_snapshot(request, history)
        register()
    return request, history


async def list_history(
    request_id: int,
    identity: Identity,
    uow: UnitOfWork,
    *,
    after_id: int | None = None,
    limit: int = 100,
) -> list[Message]:
    request = await uow.requests.get_by_id(request_id)
    assert_participant(identity, request)
    return await uow.messages.list_for_request(request_id, after_id=after_id, limit=limit)
