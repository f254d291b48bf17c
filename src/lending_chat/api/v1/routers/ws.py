"""Chat WebSocket endpoint.

The first frame on a connection must be ``connect``. After that every frame
is processed under the identity held by the connection's session, never one
carried in the frame.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from lending_chat.api.deps import (
    ManagerDep,
    RelayDep,
    UoWFactory,
    UoWFactoryDep,
    VerifierDep,
)
from lending_chat.application.dto.identity import Identity
from lending_chat.application.exceptions import AppError, UnauthenticatedError
from lending_chat.application.ports.auth import TokenVerifier
from lending_chat.config import settings
from lending_chat.domain.entities.message import Message
from lending_chat.domain.entities.request import Request
from lending_chat.infrastructure.ws.manager import ConnectionManager
from lending_chat.infrastructure.ws.protocol import (
    ConnectFrame,
    DisconnectFrame,
    PingFrame,
    SendFrame,
    SubscribeFrame,
    UnsubscribeFrame,
    error_frame,
    outbound,
    parse_frame,
)
from lending_chat.infrastructure.ws.session import ConnectionSession, FrameContext
from lending_chat.services import identity_service, message_service
from lending_chat.services.message_relay import MessageRelay, message_payload

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

CLOSE_NORMAL = 1000
CLOSE_UNAUTHENTICATED = 4001

SESSION_ATTRIBUTES_KEY = "session_attributes"


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    uow_factory: UoWFactoryDep,
    verifier: VerifierDep,
    manager: ManagerDep,
    relay: RelayDep,
) -> None:
    await websocket.accept()
    session = ConnectionSession(
        uuid.uuid4().hex,
        websocket.scope.setdefault(SESSION_ATTRIBUTES_KEY, {}),
        mirror_identity=settings.WS_MIRROR_IDENTITY,
    )
    connection = ChatConnection(websocket, session, uow_factory, verifier, manager, relay)

    try:
        identity = await connection.handshake()
    except WebSocketDisconnect:
        session.close()
        return
    if identity is None:
        return

    cid = session.connection_id
    manager.register(cid, websocket)
    heartbeat_task = asyncio.create_task(_heartbeat(websocket), name=f"ws-heartbeat-{cid}")
    try:
        await connection.run()
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", cid)
    finally:
        heartbeat_task.cancel()
        manager.disconnect(cid)
        if not session.is_terminal:
            session.close()


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(outbound("pong"))
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Heartbeat stopped", exc_info=True)


FrameHandler = Callable[[FrameContext, Any], Awaitable[None]]


class ChatConnection:
    """Read loop for one connection. Only this object mutates its session."""

    def __init__(
        self,
        ws: WebSocket,
        session: ConnectionSession,
        uow_factory: UoWFactory,
        verifier: TokenVerifier,
        manager: ConnectionManager,
        relay: MessageRelay,
    ) -> None:
        self._ws = ws
        self._session = session
        self._uow_factory = uow_factory
        self._verifier = verifier
        self._manager = manager
        self._relay = relay
        self._handlers: dict[type, FrameHandler] = {
            ConnectFrame: self._on_connect,
            SubscribeFrame: self._on_subscribe,
            UnsubscribeFrame: self._on_unsubscribe,
            SendFrame: self._on_send,
            PingFrame: self._on_ping,
            DisconnectFrame: self._on_disconnect,
        }

    async def _receive_raw(self) -> str | bytes:
        """Next text or binary frame payload; raises WebSocketDisconnect on close."""
        message = await self._ws.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(message.get("code", CLOSE_NORMAL), message.get("reason"))
        raw = message.get("text")
        if raw is None:
            raw = message.get("bytes") or b""
        return raw

    async def handshake(self) -> Identity | None:
        raw = await self._receive_raw()
        try:
            frame = parse_frame(raw)
        except PydanticValidationError:
            frame = None
        if not isinstance(frame, ConnectFrame):
            await self._reject("unauthenticated", "First frame must be connect")
            return None

        try:
            async with self._uow_factory() as uow:
                identity = await identity_service.authenticate(
                    frame.token, self._verifier, uow.users,
                )
        except UnauthenticatedError as exc:
            logger.info("WS handshake rejected: %s", exc.code)
            await self._reject(exc.code, exc.detail)
            return None

        self._session.authenticate(identity)
        await self._send_connected(identity)
        return identity

    async def run(self) -> None:
        while not self._session.is_terminal:
            raw = await self._receive_raw()
            try:
                frame = parse_frame(raw)
            except PydanticValidationError as exc:
                await self._ws.send_text(
                    error_frame("invalid_payload", exc.errors(include_url=False)[0]["msg"])
                )
                continue

            try:
                ctx = FrameContext(self._session.connection_id, self._session.restamp())
            except UnauthenticatedError as exc:
                logger.warning(
                    "Connection %s has no identity, rejecting", self._session.connection_id,
                )
                await self._reject(exc.code, exc.detail)
                return

            request_id = getattr(frame, "request_id", None)
            try:
                await self._handlers[type(frame)](ctx, frame)
            except AppError as exc:
                extra = {"request_id": request_id} if request_id is not None else {}
                await self._ws.send_text(error_frame(exc.code, exc.detail, **extra))
            except WebSocketDisconnect:
                raise
            except Exception:
                logger.exception(
                    "Frame %s failed on connection %s", frame.type, ctx.connection_id,
                )
                await self._ws.send_text(error_frame("internal_error", "Internal error"))

    async def _reject(self, code: str, detail: str) -> None:
        self._session.reject()
        await self._ws.send_text(error_frame(code, detail))
        await self._ws.close(code=CLOSE_UNAUTHENTICATED, reason=detail[:120])

    async def _send_connected(self, identity: Identity) -> None:
        await self._ws.send_text(outbound(
            "connected",
            connection_id=self._session.connection_id,
            subject_id=identity.subject_id,
            display_name=identity.display_name,
        ))

    async def _on_connect(self, ctx: FrameContext, frame: ConnectFrame) -> None:
        # Already authenticated; the connection keeps its first identity.
        await self._send_connected(ctx.identity)

    async def _on_subscribe(self, ctx: FrameContext, frame: SubscribeFrame) -> None:
        def register() -> None:
            self._manager.subscribe(ctx.connection_id, frame.request_id)

        async def send_snapshot(request: Request, history: list[Message]) -> None:
            await self._ws.send_text(outbound(
                "subscribed",
                request_id=request.id,
                status=str(request.status),
                history=[message_payload(m) for m in history],
            ))

        async with self._uow_factory() as uow:
            await message_service.open_subscription(
                frame.request_id, ctx.identity, uow, register,
                on_snapshot=send_snapshot,
                history_limit=settings.WS_HISTORY_REPLAY_LIMIT,
            )

    async def _on_unsubscribe(self, ctx: FrameContext, frame: UnsubscribeFrame) -> None:
        self._manager.unsubscribe(ctx.connection_id, frame.request_id)
        await self._ws.send_text(outbound("unsubscribed", request_id=frame.request_id))

    async def _on_send(self, ctx: FrameContext, frame: SendFrame) -> None:
        async with self._uow_factory() as uow:
            message = await message_service.send_message(
                frame.request_id, ctx.identity, frame.text, uow,
            )
        await self._relay.message_created(message)

    async def _on_ping(self, ctx: FrameContext, frame: PingFrame) -> None:
        await self._ws.send_text(outbound("pong"))

    async def _on_disconnect(self, ctx: FrameContext, frame: DisconnectFrame) -> None:
        self._manager.disconnect(ctx.connection_id)
        self._session.close()
        await self._ws.close(code=CLOSE_NORMAL)
