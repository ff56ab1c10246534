"""Secret hashing and the options that drive it."""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping

from ..errors import InvalidParameterException

DEFAULT_CRYPT_OPTIONS: dict[str, Any] = {
    "algorithm": "sha512",
    "length": 64,
    "method": "pbkdf2",
    "rounds": 200_000,
}
DEFAULT_SESSION_TIMEOUT = timedelta(minutes=30)
SESSION_SECRET_ALGORITHM = "sha512"

_BASE_OPTIONS: dict[str, Any] = {"algorithm": "sha512", "length": 64}


@dataclass(slots=True, frozen=True)
class CryptOptions:
    algorithm: str
    length: int
    method: str
    rounds: int
    salt_length: int

    @property
    def uses_pbkdf2(self) -> bool:
        return self.method == "pbkdf2"


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_non_empty_str(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def check_crypt_options(
    overrides: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] | None = None,
) -> CryptOptions:
    """Merge ``overrides`` onto ``defaults`` and validate the result.

    ``rounds`` falls back to the value in ``defaults`` and then to 1;
    ``salt_length`` falls back to half of ``length``. Unknown keys are ignored.
    Raises ``InvalidParameterException`` naming the first invalid key.
    """

    merged: dict[str, Any] = {**_BASE_OPTIONS, **(defaults or {}), **(overrides or {})}

    algorithm = merged["algorithm"]
    if not _is_non_empty_str(algorithm) or algorithm not in hashlib.algorithms_available:
        raise InvalidParameterException("algorithm", algorithm)

    length = merged["length"]
    if not _is_positive_int(length):
        raise InvalidParameterException("length", length)

    method = merged.get("method", "pbkdf2")
    if not _is_non_empty_str(method):
        raise InvalidParameterException("method", method)
    if method == "pbkdf2":
        try:
            hashlib.pbkdf2_hmac(algorithm, b"", b"", 1)
        except (TypeError, ValueError) as exc:
            raise InvalidParameterException(
                "algorithm", algorithm, "Algorithm cannot be used with pbkdf2", cause=exc
            ) from exc

    default_rounds = (defaults or {}).get("rounds", 1)
    rounds = merged.get("rounds", default_rounds)
    if not _is_positive_int(rounds):
        raise InvalidParameterException("rounds", rounds)

    salt_length = merged.get("salt_length", max(length // 2, 1))
    if not _is_positive_int(salt_length):
        raise InvalidParameterException("salt_length", salt_length)

    return CryptOptions(
        algorithm=algorithm,
        length=length,
        method=method,
        rounds=rounds,
        salt_length=salt_length,
    )


def check_session_timeout(value: object) -> timedelta | None:
    """Normalise a session timeout; ``None`` means sessions never expire.

    Integers are milliseconds.
    """

    if value is None:
        return None
    if isinstance(value, timedelta):
        if value == timedelta(0):
            return None
        if value > timedelta(0):
            return value
        raise InvalidParameterException("session_timeout", value)
    if isinstance(value, int) and not isinstance(value, bool):
        if value == 0:
            return None
        if value > 0:
            return timedelta(milliseconds=value)
    raise InvalidParameterException("session_timeout", value)


def generate_salt(options: CryptOptions) -> str:
    return secrets.token_hex(options.salt_length)


def hash_secret(secret: str, salt: str, options: CryptOptions) -> str:
    """Hash ``secret`` with ``salt`` as a hex string.

    ``pbkdf2`` stretches with HMAC over ``options.rounds`` iterations; any
    other method digests ``secret + salt`` once.
    """

    if options.uses_pbkdf2:
        derived = hashlib.pbkdf2_hmac(
            options.algorithm,
            secret.encode("utf-8"),
            salt.encode("utf-8"),
            options.rounds,
            dklen=options.length,
        )
        return derived.hex()
    digest = hashlib.new(options.algorithm, (secret + salt).encode("utf-8"))
    if options.algorithm.startswith("shake_"):
        return digest.hexdigest(options.length)  # type: ignore[call-arg]
    return digest.hexdigest()


def verify_secret(secret: str, salt: str, hashed: str, options: CryptOptions) -> bool:
    return secrets.compare_digest(hash_secret(secret, salt, options), hashed)


def hash_session_secret(secret: str) -> str:
    return hashlib.new(SESSION_SECRET_ALGORITHM, secret.encode("utf-8")).hexdigest()


def generate_session_secret() -> str:
    return secrets.token_hex(32)


__all__ = [
    "CryptOptions",
    "DEFAULT_CRYPT_OPTIONS",
    "DEFAULT_SESSION_TIMEOUT",
    "check_crypt_options",
    "check_session_timeout",
    "generate_salt",
    "generate_session_secret",
    "hash_secret",
    "hash_session_secret",
    "verify_secret",
]
