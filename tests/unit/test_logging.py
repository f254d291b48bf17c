from __future__ import annotations

import logging

from lending_chat.api.middleware.correlation_id import CorrelationIdFilter, correlation_id_ctx


def _record() -> logging.LogRecord:
    return logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)


def test_filter_stamps_current_request_id():
    token = correlation_id_ctx.set("abc123")
    try:
        record = _record()
        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "abc123"
    finally:
        correlation_id_ctx.reset(token)


def test_filter_outside_a_request():
    record = _record()
    CorrelationIdFilter().filter(record)
    assert record.correlation_id == "-"
