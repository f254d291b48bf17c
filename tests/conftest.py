"""Shared test fixtures."""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator

import pytest

from lending_chat.application.dto.identity import Identity, TokenClaims
from lending_chat.application.exceptions import InvalidCredentialError
from lending_chat.application.repositories.user import UserRecord
from lending_chat.domain.entities.item import Item
from lending_chat.domain.entities.message import Message
from lending_chat.domain.entities.request import Request
from lending_chat.domain.value_objects.enums import ItemStatus, RequestStatus
from lending_chat.domain.value_objects.lifecycle import OPEN_STATUSES

OWNER_ID = 1
REQUESTER_ID = 2
OUTSIDER_ID = 3

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, now: datetime = T0) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@dataclass
class FakeDb:
    """Shared in-memory tables; several FakeUoW instances may point at one FakeDb."""

    users: dict[int, UserRecord] = field(default_factory=dict)
    items: dict[int, Item] = field(default_factory=dict)
    requests: dict[int, Request] = field(default_factory=dict)
    messages: list[Message] = field(default_factory=list)
    _seq: dict[str, int] = field(default_factory=dict)

    def next_id(self, table: str) -> int:
        self._seq[table] = self._seq.get(table, 0) + 1
        return self._seq[table]

    def add_user(self, user_id: int, name: str, email: str | None = None) -> UserRecord:
        user = UserRecord(user_id, name, email or f"user{user_id}@example.com")
        self.users[user_id] = user
        return user

    def add_item(
        self,
        *,
        owner_id: int = OWNER_ID,
        status: str = ItemStatus.AVAILABLE,
        title: str = "Ladder",
    ) -> Item:
        item = Item(
            id=self.next_id("items"), owner_id=owner_id, title=title,
            status=status, created_at=T0,
        )
        self.items[item.id] = item
        return item

    def add_request(
        self,
        item: Item,
        *,
        requester_id: int = REQUESTER_ID,
        status: str = RequestStatus.PENDING,
    ) -> Request:
        request = Request(
            id=self.next_id("requests"), item_id=item.id, requester_id=requester_id,
            owner_id=item.owner_id, status=status, created_at=T0,
            **self.names_for(item, requester_id),
        )
        self.requests[request.id] = request
        return request

    def names_for(self, item: Item, requester_id: int) -> dict[str, str]:
        return {
            "item_title": item.title,
            "requester_name": self.users[requester_id].name,
            "owner_name": self.users[item.owner_id].name,
        }


def make_db() -> FakeDb:
    db = FakeDb()
    db.add_user(OWNER_ID, "Olivia")
    db.add_user(REQUESTER_ID, "Rowan")
    db.add_user(OUTSIDER_ID, "Mallory")
    return db


def identity_of(db: FakeDb, user_id: int) -> Identity:
    user = db.users[user_id]
    return Identity(subject_id=user.id, display_name=user.name)


@dataclass
class FakeUserReader:
    _db: FakeDb

    async def get_by_id(self, user_id: int) -> UserRecord | None:
        return self._db.users.get(user_id)


@dataclass
class FakeItemWriter:
    _db: FakeDb
    _uow: FakeUoW

    async def get_for_update(self, item_id: int) -> Item | None:
        await asyncio.sleep(0)
        return self._db.items.get(item_id)

    async def create(self, owner_id: int, title: str, status: str, created_at: datetime) -> Item:
        item = Item(
            id=self._db.next_id("items"), owner_id=owner_id, title=title,
            status=status, created_at=created_at,
        )
        self._db.items[item.id] = item
        self._uow.journal(lambda: self._db.items.pop(item.id))
        return item

    async def set_status(self, item_id: int, status: str) -> None:
        previous = self._db.items[item_id]
        self._db.items[item_id] = replace(previous, status=status)
        self._uow.journal(lambda: self._db.items.__setitem__(item_id, previous))


@dataclass
class FakeRequestReader:
    _db: FakeDb

    async def get_by_id(self, request_id: int) -> Request | None:
        return self._db.requests.get(request_id)

    async def get_open_for_item(self, item_id: int) -> Request | None:
        for r in self._db.requests.values():
            if r.item_id == item_id and r.status in OPEN_STATUSES:
                return r
        return None

    async def list_for_subject(self, subject_id: int) -> list[Request]:
        found = [r for r in self._db.requests.values() if r.is_participant(subject_id)]
        return sorted(found, key=lambda r: (r.created_at, r.id), reverse=True)


@dataclass
class FakeRequestWriter:
    _db: FakeDb
    _uow: FakeUoW

    async def get_for_update(self, request_id: int) -> Request | None:
        await asyncio.sleep(0)
        return self._db.requests.get(request_id)

    async def create(
        self, item_id: int, requester_id: int, status: str, created_at: datetime,
    ) -> Request:
        item = self._db.items[item_id]
        request = Request(
            id=self._db.next_id("requests"), item_id=item_id, requester_id=requester_id,
            owner_id=item.owner_id, status=status, created_at=created_at,
            **self._db.names_for(item, requester_id),
        )
        self._db.requests[request.id] = request
        self._uow.journal(lambda: self._db.requests.pop(request.id))
        return request

    async def update_status(
        self,
        request_id: int,
        status: str,
        *,
        approved_at: datetime | None = None,
        closed_at: datetime | None = None,
    ) -> Request:
        previous = self._db.requests[request_id]
        updated = replace(
            previous,
            status=status,
            approved_at=approved_at or previous.approved_at,
            closed_at=closed_at or previous.closed_at,
        )
        self._db.requests[request_id] = updated
        self._uow.journal(lambda: self._db.requests.__setitem__(request_id, previous))
        return updated


@dataclass
class FakeMessageReader:
    _db: FakeDb

    async def list_for_request(
        self,
        request_id: int,
        *,
        after_id: int | None = None,
        limit: int = 100,
    ) -> list[Message]:
        found = [
            replace(m, sender_name=self._db.users[m.sender_id].name)
            for m in self._db.messages
            if m.request_id == request_id and (after_id is None or m.id > after_id)
        ]
        found.sort(key=lambda m: (m.created_at, m.id))
        return found[:limit]

    async def last_created_at(self, request_id: int) -> datetime | None:
        stamps = [m.created_at for m in self._db.messages if m.request_id == request_id]
        return max(stamps, default=None)


@dataclass
class FakeMessageWriter:
    _db: FakeDb
    _uow: FakeUoW

    async def append(
        self, request_id: int, sender_id: int, text: str, created_at: datetime,
    ) -> Message:
        message = Message(
            id=self._db.next_id("messages"), request_id=request_id,
            sender_id=sender_id, text=text, created_at=created_at,
        )
        self._db.messages.append(message)
        self._uow.journal(lambda: self._db.messages.remove(message))
        return message


class FakeUoW:
    """In-memory UoW for unit tests.

    Writes apply to the shared FakeDb immediately and are journaled;
    rollback undoes everything since the last commit.
    """

    def __init__(self, db: FakeDb | None = None) -> None:
        self.db = db if db is not None else make_db()
        self.users = FakeUserReader(self.db)
        self.items_w = FakeItemWriter(self.db, self)
        self.requests = FakeRequestReader(self.db)
        self.requests_w = FakeRequestWriter(self.db, self)
        self.messages = FakeMessageReader(self.db)
        self.messages_w = FakeMessageWriter(self.db, self)
        self.commits = 0
        self.rollbacks = 0
        self._undo: list[Callable[[], Any]] = []

    def journal(self, undo: Callable[[], Any]) -> None:
        self._undo.append(undo)

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._undo.clear()
        self.commits += 1

    async def rollback(self) -> None:
        while self._undo:
            self._undo.pop()()
        self.rollbacks += 1

    async def __aenter__(self) -> FakeUoW:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            await self.rollback()


def uow_factory_for(db: FakeDb) -> Callable[[], Any]:
    """Stand-in for api.deps.get_uow_factory: a fresh FakeUoW per unit of work."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[FakeUoW]:
        async with FakeUoW(db) as uow:
            yield uow

    return factory


class FakeVerifier:
    """Accepts tokens of the form ``<user_id>:<email>``."""

    async def verify(self, token: str) -> TokenClaims:
        subject, _, email = token.partition(":")
        if not subject.isdigit() or not email:
            raise InvalidCredentialError("Bad token")
        return TokenClaims(
            subject_id=int(subject), subject_email=email,
            expires_at=T0 + timedelta(days=1),
        )


def token_for(db: FakeDb, user_id: int) -> str:
    return f"{user_id}:{db.users[user_id].email}"


@dataclass
class RecordingPublisher:
    events: list[tuple[int, str, dict[str, Any]]] = field(default_factory=list)

    async def publish(self, request_id: int, event_type: str, data: dict[str, Any]) -> None:
        self.events.append((request_id, event_type, data))


@pytest.fixture
def db() -> FakeDb:
    return make_db()


@pytest.fixture
def uow(db) -> FakeUoW:
    return FakeUoW(db)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def owner(db) -> Identity:
    return identity_of(db, OWNER_ID)


@pytest.fixture
def requester(db) -> Identity:
    return identity_of(db, REQUESTER_ID)


@pytest.fixture
def outsider(db) -> Identity:
    return identity_of(db, OUTSIDER_ID)
