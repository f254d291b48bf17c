"""FastAPI dependency injection helpers."""
from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Annotated, AsyncIterator, Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from lending_chat.application.dto.identity import Identity
from lending_chat.application.ports.auth import TokenVerifier
from lending_chat.application.ports.bus import ChannelPublisher
from lending_chat.application.uow import UnitOfWork
from lending_chat.config import settings
from lending_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from lending_chat.infrastructure.bus.local import LocalChannelPublisher
from lending_chat.infrastructure.bus.redis_pubsub import RedisPubSubPublisher
from lending_chat.infrastructure.db.session import open_uow
from lending_chat.infrastructure.ws.manager import ConnectionManager
from lending_chat.services import identity_service
from lending_chat.services.message_relay import MessageRelay

_bearer_scheme = HTTPBearer()

UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]


def get_uow_factory() -> UoWFactory:
    """WebSocket handlers open one unit of work per frame through this factory."""
    return open_uow


async def get_uow(
    factory: Annotated[UoWFactory, Depends(get_uow_factory)],
) -> AsyncIterator[UnitOfWork]:
    async with factory() as uow:
        yield uow


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]
UoWFactoryDep = Annotated[UoWFactory, Depends(get_uow_factory)]


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(
            settings.JWT_SECRET,
            settings.JWT_ALGORITHM,
            issuer=settings.JWT_ISSUER,
            leeway=settings.JWT_LEEWAY_SECONDS,
        )
    return _verifier


VerifierDep = Annotated[TokenVerifier, Depends(get_verifier)]


_manager = ConnectionManager()


def get_manager() -> ConnectionManager:
    return _manager


ManagerDep = Annotated[ConnectionManager, Depends(get_manager)]


def get_publisher(conn: HTTPConnection, manager: ManagerDep) -> ChannelPublisher:
    if settings.FANOUT_BACKEND == "redis":
        return RedisPubSubPublisher(conn.app.state.redis, settings.REDIS_PUBSUB_CHANNEL)
    return LocalChannelPublisher(manager)


def get_relay(
    publisher: Annotated[ChannelPublisher, Depends(get_publisher)],
) -> MessageRelay:
    return MessageRelay(publisher)


RelayDep = Annotated[MessageRelay, Depends(get_relay)]


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: VerifierDep,
    uow: UoWDep,
) -> Identity:
    """UnauthenticatedError propagates to the app-level handler (401)."""
    return await identity_service.authenticate(credentials.credentials, verifier, uow.users)


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
