"""Request lifecycle: open, approve, reject, return.

Every mutation runs under the per-resource lock and inside one unit of work,
so the request row and its item row are committed or rolled back together.
"""
from __future__ import annotations

import logging

from lending_chat.application.dto.identity import Identity
from lending_chat.application.exceptions import (
    DuplicateOpenRequestError,
    InvalidTransitionError,
    NotFoundError,
    SelfRequestError,
    TargetUnavailableError,
)
from lending_chat.application.locks import item_key, request_key, resource_locks
from lending_chat.application.policies.permissions import assert_owner, assert_participant
from lending_chat.application.ports.clock import Clock, SystemClock
from lending_chat.application.uow import UnitOfWork
from lending_chat.domain.entities.request import Request
from lending_chat.domain.value_objects.enums import ItemStatus, RequestStatus
from lending_chat.domain.value_objects.lifecycle import ITEM_STATUS_FOR, can_transition

logger = logging.getLogger(__name__)

_clock: Clock = SystemClock()


async def open_request(
    item_id: int,
    requester: Identity,
    uow: UnitOfWork,
    *,
    clock: Clock = _clock,
) -> Request:
    async with resource_locks.hold(item_key(item_id)), uow:
        item = await uow.items_w.get_for_update(item_id)
        if item is None:
            raise NotFoundError("Item not found")
        if item.owner_id == requester.subject_id:
            raise SelfRequestError("You cannot request your own item")
        if item.status != ItemStatus.AVAILABLE:
            raise TargetUnavailableError("Item is not available for request")
        if await uow.requests.get_open_for_item(item_id) is not None:
            raise DuplicateOpenRequestError("An active request for this item already exists")

        request = await uow.requests_w.create(
            item_id, requester.subject_id, RequestStatus.PENDING, clock.now(),
        )
        await uow.items_w.set_status(item_id, ITEM_STATUS_FOR[RequestStatus.PENDING])
        await uow.commit()

    logger.info(
        "Request %d opened on item %d by user %d",
        request.id, item_id, requester.subject_id,
    )
    return request


async def transition_request(
    request_id: int,
    actor: Identity,
    new_status: RequestStatus,
    uow: UnitOfWork,
    *,
    clock: Clock = _clock,
) -> Request:
    async with resource_locks.hold(request_key(request_id)), uow:
        request = await uow.requests_w.get_for_update(request_id)
        assert_owner(actor, request)
        assert request is not None

        async with resource_locks.hold(item_key(request.item_id)):
            item = await uow.items_w.get_for_update(request.item_id)
            if item is None:
                raise NotFoundError("Item not found")
            if not can_transition(RequestStatus(request.status), new_status):
                raise InvalidTransitionError(
                    f"Cannot move a {request.status} request to {new_status}"
                )

            now = clock.now()
            if new_status == RequestStatus.APPROVED:
                updated = await uow.requests_w.update_status(
                    request_id, new_status, approved_at=now,
                )
            else:
                updated = await uow.requests_w.update_status(
                    request_id, new_status, closed_at=now,
                )
            await uow.items_w.set_status(item.id, ITEM_STATUS_FOR[new_status])
            await uow.commit()

    logger.info(
        "Request %d moved %s -> %s by owner %d",
        request_id, request.status, new_status, actor.subject_id,
    )
    return updated


async def get_request(request_id: int, identity: Identity, uow: UnitOfWork) -> Request:
    request = await uow.requests.get_by_id(request_id)
    return assert_participant(identity, request)


async def list_requests(identity: Identity, uow: UnitOfWork) -> list[Request]:
    return await uow.requests.list_for_subject(identity.subject_id)
