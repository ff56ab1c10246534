"""Password and user name policy.

Character classes follow Unicode general categories so that non-ASCII
letters, digits and punctuation count the same way ASCII ones do.
"""

from __future__ import annotations

import unicodedata

from ..errors import InvalidParameterException

INVALID_SECRET_MESSAGE = "Invalid secret"
INVALID_USER_NAME_MESSAGE = "Invalid user name"

_SECRET_CATEGORY_PREFIXES = ("L", "N", "P")


def _category(char: str) -> str:
    return unicodedata.category(char)


def _is_secret_char(char: str) -> bool:
    return _category(char).startswith(_SECRET_CATEGORY_PREFIXES)


def has_digit(value: str) -> bool:
    return any(_category(char).startswith("N") for char in value)


def has_lower_case_letter(value: str) -> bool:
    return any(_category(char) == "Ll" for char in value)


def has_upper_case_letter(value: str) -> bool:
    return any(_category(char) == "Lu" for char in value)


def has_punctuation(value: str) -> bool:
    return any(_category(char).startswith("P") for char in value)


def valid_secret_shape(value: str) -> bool:
    """Return whether ``value`` is made of letters, numbers, punctuation and single spaces.

    The first and last characters may not be spaces and spaces never follow
    each other.
    """

    if not value:
        return False
    if not (_is_secret_char(value[0]) and _is_secret_char(value[-1])):
        return False
    previous_space = False
    for char in value[1:-1]:
        if char == " ":
            if previous_space:
                return False
            previous_space = True
        elif _is_secret_char(char):
            previous_space = False
        else:
            return False
    return True


_REQUIRED_CLASSES = (
    (has_lower_case_letter, "Missing lower case letter"),
    (has_upper_case_letter, "Missing upper case letter"),
    (has_digit, "Missing digit"),
    (has_punctuation, "Missing punctuation character"),
)


def check_secret(candidate: object, message: str = INVALID_SECRET_MESSAGE) -> str:
    """Return ``candidate`` if it satisfies the password policy.

    Raises ``InvalidParameterException`` for ``"secret"``; its cause is a
    ``TypeError`` when the candidate is not a string and a ``ValueError``
    naming the first failed rule otherwise. The secret itself is never
    attached to the error.
    """

    if not isinstance(candidate, str):
        raise InvalidParameterException(
            "secret",
            message=message,
            cause=TypeError(f"Secret must be a string, not {type(candidate).__name__}"),
        )
    if not valid_secret_shape(candidate):
        raise InvalidParameterException(
            "secret",
            message=message,
            cause=ValueError("Secret contains invalid characters or spacing"),
        )
    for predicate, reason in _REQUIRED_CLASSES:
        if not predicate(candidate):
            raise InvalidParameterException("secret", message=message, cause=ValueError(reason))
    return candidate


def valid_user_name(value: object) -> bool:
    return isinstance(value, str) and bool(value) and value == value.strip()


def check_user_name(candidate: object, message: str = INVALID_USER_NAME_MESSAGE) -> str:
    """Return ``candidate`` if it is a non-empty string without surrounding whitespace."""

    if not isinstance(candidate, str):
        raise InvalidParameterException(
            "user_name",
            candidate,
            message,
            cause=TypeError(f"User name must be a string, not {type(candidate).__name__}"),
        )
    if not valid_user_name(candidate):
        raise InvalidParameterException(
            "user_name",
            candidate,
            message,
            cause=ValueError("User name must be non-empty and not padded with whitespace"),
        )
    return candidate


__all__ = [
    "check_secret",
    "check_user_name",
    "has_digit",
    "has_lower_case_letter",
    "has_punctuation",
    "has_upper_case_letter",
    "valid_secret_shape",
    "valid_user_name",
]
