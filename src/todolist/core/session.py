"""Helpers for the signed cookie session that tracks the logged in user."""

from __future__ import annotations

from typing import Any, MutableMapping

SESSION_USER_KEY = "user_id"
SESSION_ID_KEY = "session_id"


def get_session_ids(session: MutableMapping[str, Any]) -> tuple[str, str] | None:
    """Return ``(user_id, session_id)`` stored in the cookie, if both are present."""

    user_id = session.get(SESSION_USER_KEY)
    session_id = session.get(SESSION_ID_KEY)
    if not isinstance(user_id, str) or not user_id:
        return None
    if not isinstance(session_id, str) or not session_id:
        return None
    return user_id, session_id


def login_user(session: MutableMapping[str, Any], user_id: str, session_id: str) -> None:
    """Persist the authenticated user's identifiers in the cookie session."""

    session[SESSION_USER_KEY] = user_id
    session[SESSION_ID_KEY] = session_id


def logout_user(session: MutableMapping[str, Any]) -> None:
    session.pop(SESSION_USER_KEY, None)
    session.pop(SESSION_ID_KEY, None)


__all__ = [
    "SESSION_ID_KEY",
    "SESSION_USER_KEY",
    "get_session_ids",
    "login_user",
    "logout_user",
]
