"""Request lifecycle rules shared by the services and the storage layer."""
from __future__ import annotations

from datetime import datetime

from lending_chat.domain.value_objects.enums import ItemStatus, RequestStatus

ALLOWED_TRANSITIONS: frozenset[tuple[RequestStatus, RequestStatus]] = frozenset(
    {
        (RequestStatus.PENDING, RequestStatus.APPROVED),
        (RequestStatus.PENDING, RequestStatus.REJECTED),
        (RequestStatus.APPROVED, RequestStatus.RETURNED),
    }
)

OPEN_STATUSES: frozenset[RequestStatus] = frozenset(
    {RequestStatus.PENDING, RequestStatus.APPROVED}
)

# Item status is a pure function of the status of the request that last touched it.
ITEM_STATUS_FOR: dict[RequestStatus, ItemStatus] = {
    RequestStatus.PENDING: ItemStatus.REQUESTED,
    RequestStatus.APPROVED: ItemStatus.APPROVED,
    RequestStatus.REJECTED: ItemStatus.AVAILABLE,
    RequestStatus.RETURNED: ItemStatus.COMPLETED,
}


def can_transition(current: RequestStatus, new: RequestStatus) -> bool:
    return (current, new) in ALLOWED_TRANSITIONS


def is_open_for_messaging(status: RequestStatus | str) -> bool:
    return status == RequestStatus.APPROVED


def next_message_timestamp(now: datetime, last: datetime | None) -> datetime:
    """Never hand out a timestamp older than the newest one already stored."""
    if last is not None and now < last:
        return last
    return now
