"""Channel authorization gate: who may read, subscribe to, write to or move a request."""
from __future__ import annotations

from lending_chat.application.dto.identity import Identity
from lending_chat.application.exceptions import (
    ChatNotActiveError,
    EmptyMessageError,
    ForbiddenError,
    NotFoundError,
)
from lending_chat.domain.entities.request import Request
from lending_chat.domain.value_objects.lifecycle import is_open_for_messaging


def assert_participant(identity: Identity, request: Request | None) -> Request:
    """Raise if the request doesn't exist or identity is neither requester nor owner."""
    if request is None:
        raise NotFoundError("Request not found")
    if not request.is_participant(identity.subject_id):
        raise ForbiddenError("Not a participant of this request")
    return request


def assert_owner(identity: Identity, request: Request | None) -> Request:
    if request is None:
        raise NotFoundError("Request not found")
    if request.owner_id != identity.subject_id:
        raise ForbiddenError("Only the item owner can change the request status")
    return request


def assert_can_subscribe(identity: Identity, request: Request | None) -> Request:
    # Subscribing is allowed in every status so participants can wait for approval.
    return assert_participant(identity, request)


def assert_can_send(identity: Identity, request: Request | None, text: str | None) -> Request:
    if request is None:
        raise NotFoundError("Request not found")
    if not is_open_for_messaging(request.status):
        raise ChatNotActiveError("Chat is only available for APPROVED requests")
    if not request.is_participant(identity.subject_id):
        raise ForbiddenError("Not a participant of this request")
    if text is None or not text.strip():
        raise EmptyMessageError("Message text cannot be empty")
    return request
