from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from lending_chat.infrastructure.ws.protocol import (
    ConnectFrame,
    DisconnectFrame,
    PingFrame,
    SendFrame,
    SubscribeFrame,
    error_frame,
    outbound,
    parse_frame,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('{"type": "connect", "token": "abc"}', ConnectFrame),
        ('{"type": "subscribe", "request_id": 7}', SubscribeFrame),
        ('{"type": "send", "request_id": 7, "text": "hi"}', SendFrame),
        ('{"type": "ping"}', PingFrame),
        ('{"type": "disconnect"}', DisconnectFrame),
    ],
)
def test_parse_known_frames(raw, expected):
    assert isinstance(parse_frame(raw), expected)


def test_send_without_text_parses_as_none():
    frame = parse_frame('{"type": "send", "request_id": 7}')

    assert isinstance(frame, SendFrame)
    assert frame.text is None


@pytest.mark.parametrize(
    "raw",
    [
        '{"type": "mark_read", "request_id": 7}',
        '{"type": "subscribe"}',
        '{"request_id": 7}',
        "not json",
    ],
)
def test_parse_rejects_unknown_or_malformed(raw):
    with pytest.raises(ValidationError):
        parse_frame(raw)


def test_frames_cannot_carry_identity():
    frame = parse_frame('{"type": "send", "request_id": 7, "text": "hi", "sender_id": 1}')

    assert not hasattr(frame, "sender_id")


def test_error_frame_shape():
    payload = json.loads(error_frame("forbidden", "nope", request_id=7))

    assert payload == {
        "type": "error",
        "data": {"code": "forbidden", "detail": "nope", "request_id": 7},
    }


def test_outbound_shape():
    assert json.loads(outbound("pong")) == {"type": "pong", "data": {}}
