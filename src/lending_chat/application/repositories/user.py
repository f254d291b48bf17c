from __future__ import annotations

from typing import Protocol


class UserRecord:
    """Lightweight read-model used to resolve a token subject."""

    __slots__ = ("id", "name", "email")

    def __init__(self, id: int, name: str, email: str) -> None:
        self.id = id
        self.name = name
        self.email = email


class UserReader(Protocol):
    async def get_by_id(self, user_id: int) -> UserRecord | None: ...
