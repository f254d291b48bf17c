"""Seed development data: an owner, a requester and one available item.

Prints a bearer token per user so the API and the WebSocket can be tried
straight away.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy import select

from lending_chat.application.ports.auth import TokenIssuer
from lending_chat.config import settings
from lending_chat.domain.value_objects.enums import ItemStatus
from lending_chat.infrastructure.auth.hs256_issuer import HS256TokenIssuer
from lending_chat.infrastructure.db.base import Base
from lending_chat.infrastructure.db.models import UserModel
from lending_chat.infrastructure.db.session import AsyncSessionLocal, engine
from lending_chat.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

USERS = [
    ("Olivia Owner", "owner@example.com"),
    ("Rowan Requester", "requester@example.com"),
]


async def _get_or_create_user(session, name: str, email: str) -> UserModel:
    user = (
        await session.execute(select(UserModel).where(UserModel.email == email))
    ).scalar_one_or_none()
    if user is None:
        user = UserModel(name=name, email=email)
        session.add(user)
        await session.flush()
    return user


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    issuer: TokenIssuer = HS256TokenIssuer(
        settings.JWT_SECRET,
        settings.JWT_ALGORITHM,
        issuer=settings.JWT_ISSUER,
        expires_in=settings.JWT_EXPIRATION_SECONDS,
    )

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        owner, requester = [
            await _get_or_create_user(session, name, email) for name, email in USERS
        ]
        item = await uow.items_w.create(
            owner.id, "Cordless drill", ItemStatus.AVAILABLE, datetime.now(timezone.utc),
        )
        await uow.commit()

        logger.info("Seeded item %d owned by user %d", item.id, owner.id)
        for user in (owner, requester):
            print(f"{user.name} (id={user.id}): {issuer.issue(user.email, user.id)}")

    await engine.dispose()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
