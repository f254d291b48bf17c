"""WebSocket frame models.

Inbound frames form a closed union discriminated on ``type``; each variant
has exactly one handler on the server side.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class ConnectFrame(BaseModel):
    type: Literal["connect"]
    token: str


class SubscribeFrame(BaseModel):
    type: Literal["subscribe"]
    request_id: int


class UnsubscribeFrame(BaseModel):
    type: Literal["unsubscribe"]
    request_id: int


class SendFrame(BaseModel):
    type: Literal["send"]
    request_id: int
    text: str | None = None


class PingFrame(BaseModel):
    type: Literal["ping"]


class DisconnectFrame(BaseModel):
    type: Literal["disconnect"]


InboundFrame = Annotated[
    Union[
        ConnectFrame,
        SubscribeFrame,
        UnsubscribeFrame,
        SendFrame,
        PingFrame,
        DisconnectFrame,
    ],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[InboundFrame] = TypeAdapter(InboundFrame)


def parse_frame(raw: str | bytes) -> InboundFrame:
    """Raise pydantic.ValidationError for malformed or unknown frames."""
    return _inbound_adapter.validate_json(raw)


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # connected | subscribed | unsubscribed | message.created | request.status_changed | error | pong
    data: dict[str, Any] = {}


def outbound(event_type: str, **data: Any) -> str:
    return WsOutbound(type=event_type, data=data).model_dump_json()


def error_frame(code: str, detail: str = "", **extra: Any) -> str:
    return outbound("error", code=code, detail=detail, **extra)
