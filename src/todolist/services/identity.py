"""In-memory registry of users, their credentials and login sessions."""

from __future__ import annotations

import asyncio
import logging
import secrets
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from ..core.passwords import check_secret, check_user_name
from ..core.security import (
    DEFAULT_CRYPT_OPTIONS,
    DEFAULT_SESSION_TIMEOUT,
    CryptOptions,
    check_crypt_options,
    check_session_timeout,
    generate_salt,
    generate_session_secret,
    hash_secret,
    hash_session_secret,
    verify_secret,
)
from ..errors import (
    AccessForbiddenException,
    AuthenticationRequiredException,
    BadRequestException,
    InvalidParameterException,
    NotFoundException,
)
from ..models import Clock, Session, User, UserInfo, unique_id, utcnow

logger = logging.getLogger(__name__)


def _coerce_user_info(user_name: str, user_info: UserInfo | Mapping[str, Any] | None) -> UserInfo:
    if user_info is None:
        info = UserInfo()
    elif isinstance(user_info, UserInfo):
        info = user_info.model_copy()
    else:
        try:
            info = UserInfo.model_validate(user_info)
        except ValidationError as exc:
            raise InvalidParameterException("user_info", message="Invalid user information", cause=exc) from exc
    if info.display_name is None:
        info.display_name = user_name
    # Only ``verify_email`` marks an address as verified.
    info.email_verified = False
    return info


def _check_timestamp(parameter_name: str, value: object) -> datetime:
    """Return ``value`` if it is a timezone-aware ``datetime``."""

    if not isinstance(value, datetime):
        raise InvalidParameterException(
            parameter_name,
            value,
            cause=TypeError(f"Expected a datetime, not {type(value).__name__}"),
        )
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidParameterException(
            parameter_name,
            value,
            cause=ValueError("Timestamp has no timezone"),
        )
    return value


class IdentityStore:
    """Users and sessions kept in process memory.

    Every domain operation is a coroutine that raises one of the
    ``todolist.errors`` exceptions on failure. Expired sessions are kept as
    inert records and are only recognised as expired when next read.
    """

    def __init__(
        self,
        *,
        users: Mapping[str, User] | Iterable[User] | None = None,
        sessions: Mapping[str, Session] | Iterable[Session] | None = None,
        crypt_options: Mapping[str, Any] | None = None,
        session_timeout: timedelta | int | None = DEFAULT_SESSION_TIMEOUT,
        clock: Clock = utcnow,
    ) -> None:
        self._crypt_options = check_crypt_options(crypt_options, DEFAULT_CRYPT_OPTIONS)
        self._session_timeout = check_session_timeout(session_timeout)
        self._clock = clock
        self._users: dict[str, User] = {}
        self._user_ids_by_name: dict[str, str] = {}
        self._sessions: dict[str, Session] = {}
        for user in _records(users):
            self._users[user.id] = user
            self._user_ids_by_name[user.user_name] = user.id
        for session in _records(sessions):
            self._sessions[session.id] = session

    @property
    def crypt_options(self) -> CryptOptions:
        return self._crypt_options

    @property
    def session_timeout(self) -> timedelta | None:
        return self._session_timeout

    @property
    def users(self) -> Mapping[str, User]:
        return MappingProxyType(self._users)

    @property
    def sessions(self) -> Mapping[str, Session]:
        return MappingProxyType(self._sessions)

    def now(self) -> datetime:
        return self._clock()

    def _expiry_from(self, now: datetime) -> datetime | None:
        if self._session_timeout is None:
            return None
        return now + self._session_timeout

    # Synchronous lookups shared with the content store.

    def has_user(self, user_id: str) -> bool:
        return user_id in self._users

    def find_active_user(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        if user is None or user.is_expired(self.now()):
            return None
        return user

    def check_active_session(self, session_id: str, user_id: str) -> Session:
        """Return the session if it is active and owned by an active ``user_id``.

        Raises ``AccessForbiddenException`` for an unknown or expired user,
        ``AuthenticationRequiredException`` for an unknown or expired session
        and ``BadRequestException`` when the session belongs to someone else.
        """

        now = self.now()
        user = self._users.get(user_id)
        if user is None or user.is_expired(now):
            raise AccessForbiddenException("User cannot access the content")
        session = self._sessions.get(session_id)
        if session is None or not session.is_active(now):
            raise AuthenticationRequiredException("Session is missing or expired")
        if session.user_id != user_id:
            raise BadRequestException("Session does not belong to the user")
        return session

    # Users

    async def create_user(
        self,
        user_name: str,
        secret: str,
        user_info: UserInfo | Mapping[str, Any] | None = None,
        expiration: datetime | None = None,
    ) -> UserInfo:
        """Register ``user_name`` and return its public information."""

        try:
            check_user_name(user_name)
            check_secret(secret)
        except InvalidParameterException as exc:
            logger.info(
                "Registration rejected",
                extra={"parameter_name": exc.parameter_name, "reason": str(exc.cause)},
            )
            raise InvalidParameterException(
                "user_name or secret",
                message="Invalid user name or secret",
                cause=exc,
            ) from exc
        if user_name in self._user_ids_by_name:
            raise InvalidParameterException("user_name", user_name, "User name is already taken")
        info = _coerce_user_info(user_name, user_info)
        if expiration is not None:
            _check_timestamp("expiration", expiration)

        options = self._crypt_options
        salt = generate_salt(options)
        hashed = await asyncio.to_thread(hash_secret, secret, salt, options)

        # Another registration may have committed while hashing.
        if user_name in self._user_ids_by_name:
            raise InvalidParameterException("user_name", user_name, "User name is already taken")
        user = User(
            id=unique_id(self._users),
            user_name=user_name,
            hashed_secret=hashed,
            salt=salt,
            user_info=info,
            expires=expiration,
            created=self.now(),
        )
        self._users[user.id] = user
        self._user_ids_by_name[user_name] = user.id
        logger.info("User registered", extra={"user_id": user.id})
        return user.user_info.model_copy()

    async def get_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundException("User does not exist")
        return user.model_copy()

    async def get_user_by_name(self, user_name: str) -> User:
        user_id = self._user_ids_by_name.get(user_name)
        if user_id is None:
            raise NotFoundException("User does not exist")
        return self._users[user_id].model_copy()

    async def valid_password(self, user_name: str, secret: str) -> UserInfo:
        """Return the user's public information if ``secret`` is their password."""

        user_id = self._user_ids_by_name.get(user_name)
        if user_id is None:
            raise NotFoundException("Invalid user")
        user = self._users[user_id]
        if user.is_expired(self.now()):
            logger.warning("Login attempted on an expired account", extra={"user_id": user.id})
            raise AccessForbiddenException("User account has expired")
        matches = isinstance(secret, str) and await asyncio.to_thread(
            verify_secret, secret, user.salt, user.hashed_secret, self._crypt_options
        )
        if not matches:
            logger.warning("Invalid password", extra={"user_id": user.id})
            raise AccessForbiddenException("Invalid password")
        return user.user_info.model_copy()

    async def verify_email(self, user_id: str) -> UserInfo:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundException("User does not exist")
        user.user_info.email_verified = True
        return user.user_info.model_copy()

    # Sessions

    def _new_session_secret(self) -> tuple[str, str]:
        taken = {session.hashed_secret for session in self._sessions.values()}
        while True:
            secret = generate_session_secret()
            hashed = hash_session_secret(secret)
            if hashed not in taken:
                return secret, hashed

    async def create_session(self, user_id: str) -> Session:
        """Open a session for ``user_id``.

        The returned copy carries the raw session ``secret``; the stored
        record keeps only its hash.
        """

        if self.find_active_user(user_id) is None:
            raise AccessForbiddenException("User cannot open a session")
        now = self.now()
        secret, hashed = self._new_session_secret()
        session = Session(
            id=unique_id(self._sessions),
            user_id=user_id,
            created=now,
            updated=now,
            expires=self._expiry_from(now),
            hashed_secret=hashed,
        )
        self._sessions[session.id] = session
        logger.info("Session opened", extra={"user_id": user_id, "session_id": session.id})
        return session.model_copy(update={"secret": secret})

    async def update_session(self, session_id: str, user_id: str, detail: Any | None = None) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundException("Session does not exist")
        if session.user_id != user_id:
            raise BadRequestException("Session does not belong to the user")
        now = self.now()
        if not session.is_active(now):
            raise AuthenticationRequiredException("Session has expired")
        session.updated = now
        session.expires = self._expiry_from(now)
        if detail is not None:
            session.session_detail = detail
        return session.model_copy()

    async def close_session(self, session_id: str, close_time: datetime | None = None) -> None:
        """Expire the session at ``close_time``; closing a closed session does nothing."""

        now = self.now()
        if close_time is None:
            close_time = now
        elif _check_timestamp("close_time", close_time) > now:
            raise InvalidParameterException("close_time", close_time, "Close time is in the future")
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundException("Session does not exist")
        if session.is_active(now):
            session.expires = close_time
            logger.info("Session closed", extra={"user_id": session.user_id, "session_id": session_id})

    async def close_user_sessions(self, user_id: str) -> int:
        """Close every active session of ``user_id`` and return how many were closed."""

        if user_id not in self._users:
            raise NotFoundException("User does not exist")
        now = self.now()
        closed = 0
        for session in self._sessions.values():
            if session.user_id == user_id and session.is_active(now):
                session.expires = now
                closed += 1
        logger.info("User sessions closed", extra={"user_id": user_id, "closed": closed})
        return closed

    async def verify_session_secret(self, session_id: str, secret: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundException("Session does not exist")
        if not session.is_active(self.now()):
            raise AuthenticationRequiredException("Session has expired")
        if not isinstance(secret, str) or not secrets.compare_digest(
            hash_session_secret(secret), session.hashed_secret
        ):
            raise AccessForbiddenException("Invalid session secret")
        return session.model_copy()


def _records(source: Mapping[str, Any] | Iterable[Any] | None) -> Iterable[Any]:
    if source is None:
        return ()
    if isinstance(source, Mapping):
        return source.values()
    return source


__all__ = ["IdentityStore"]
