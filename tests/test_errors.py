from __future__ import annotations

import pytest

from todolist.errors import (
    AccessForbiddenException,
    ApplicationError,
    AuthenticationRequiredException,
    BadRequestException,
    HttpStatusDetail,
    HttpStatusException,
    InvalidParameterException,
    NotFoundException,
    get_status_message,
)


def test_status_message_lookup() -> None:
    assert get_status_message(404) == "Not Found"
    assert get_status_message(420) == "Method Failure"
    assert get_status_message(420, "Twitter") == "Enhance Your Calm"
    assert get_status_message(420, "Unknown vendor") == "Method Failure"
    assert get_status_message(299) is None


@pytest.mark.parametrize(
    "exception_type, status_code, code",
    [
        (NotFoundException, 404, "not_found"),
        (AuthenticationRequiredException, 401, "unauthorized"),
        (AccessForbiddenException, 403, "forbidden"),
        (BadRequestException, 400, "bad_request"),
    ],
)
def test_http_exceptions_fix_their_status(exception_type, status_code: int, code: str) -> None:
    error = exception_type("Failure")

    assert isinstance(error, HttpStatusException)
    assert error.status_code == status_code
    assert error.status_message == get_status_message(status_code)
    assert error.code == code
    assert error.message == "Failure"
    assert error.detail == HttpStatusDetail(status_code)


def test_status_message_override_and_unknown_codes() -> None:
    assert NotFoundException(status_message="Gone fishing").status_message == "Gone fishing"
    assert HttpStatusException(status_code=299).status_message == "Unknown Status Code"
    assert HttpStatusException(status_code=498).status_message == "Invalid Token"
    assert HttpStatusException().status_code == 500
    assert HttpStatusException(status_code=418).code == "http_error"


@pytest.mark.parametrize("status_code", [-1, 600, "404", True, None])
def test_invalid_status_code_is_a_programming_error(status_code: object) -> None:
    with pytest.raises(TypeError):
        HttpStatusException(status_code=status_code)  # type: ignore[arg-type]


def test_cause_is_chained() -> None:
    original = KeyError("missing")
    error = NotFoundException("Not there", cause=original)

    assert error.cause is original
    assert error.__cause__ is original


def test_default_messages() -> None:
    assert ApplicationError().message == "Application error."
    assert BadRequestException().message == "Bad request."


def test_invalid_parameter_detail() -> None:
    error = InvalidParameterException("length", "x")

    assert not isinstance(error, HttpStatusException)
    assert error.detail == {"parameter_name": "length", "parameter_value": "x"}
    assert error.parameter_name == "length"
    assert error.parameter_value == "x"
    assert error.message == "Invalid length value"
