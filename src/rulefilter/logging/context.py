from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar, Token
from typing import Optional

_TRACE_ID: ContextVar[Optional[str]] = ContextVar("rulefilter_trace_id", default=None)


def gen_trace_id() -> str:
    return uuid.uuid4().hex


def set_current_trace_id(trace_id: str) -> Token:
    return _TRACE_ID.set(trace_id)


def get_current_trace_id() -> Optional[str]:
    return _TRACE_ID.get()


def clear_current_trace_id(token: Optional[Token] = None) -> None:
    if token is not None:
        _TRACE_ID.reset(token)
    else:
        _TRACE_ID.set(None)


class TraceIdFilter(logging.Filter):
    """Inject ``trace_id`` into every record passing through the logger/handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_current_trace_id()
        return True


__all__ = [
    "TraceIdFilter",
    "clear_current_trace_id",
    "gen_trace_id",
    "get_current_trace_id",
    "set_current_trace_id",
]
