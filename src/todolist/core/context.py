"""Identifiers describing the request being served, for log correlation."""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass, replace

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass(slots=True, frozen=True)
class RequestContext:
    """Correlation data for one request.

    ``user_id`` and ``session_id`` are set once the signed session cookie has
    been read; anonymous requests only carry a ``request_id``.
    """

    request_id: str = "-"
    user_id: str | None = None
    session_id: str | None = None


_context_var: ContextVar[RequestContext] = ContextVar("todolist_request_context", default=RequestContext())


def current_context() -> RequestContext:
    return _context_var.get()


def get_request_id() -> str:
    return _context_var.get().request_id


def bind_request_id(request_id: str) -> Token[RequestContext]:
    return _context_var.set(replace(_context_var.get(), request_id=request_id))


def bind_session_identity(user_id: str, session_id: str) -> Token[RequestContext]:
    """Attach the logged in user and session to the current request context."""

    return _context_var.set(replace(_context_var.get(), user_id=user_id, session_id=session_id))


def reset_context(token: Token[RequestContext]) -> None:
    _context_var.reset(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "RequestContext",
    "bind_request_id",
    "bind_session_identity",
    "current_context",
    "get_request_id",
    "reset_context",
]
