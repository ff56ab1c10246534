"""Error taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations

import logging
from contextvars import Token
from http import HTTPStatus
from typing import Any, Mapping

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER, RequestContext, bind_request_id, reset_context
from .schemas.system import ErrorEnvelope

logger = logging.getLogger(__name__)

UNKNOWN_STATUS_MESSAGE = "Unknown Status Code"

# Codes outside the IANA registry, keyed by the vendor that uses them. The
# first entry of a context wins when no context is requested.
_UNOFFICIAL_STATUS_MESSAGES: dict[int, dict[str, str]] = {
    218: {"Apache": "This is fine"},
    419: {"Laravel": "Page Expired"},
    420: {"Spring": "Method Failure", "Twitter": "Enhance Your Calm"},
    430: {"Shopify": "Shopify Security Rejection"},
    440: {"IIS": "Login Time-out"},
    444: {"nginx": "No Response"},
    449: {"IIS": "Retry With"},
    450: {"Microsoft": "Blocked by Windows Parental Controls"},
    494: {"nginx": "Request header too large"},
    495: {"nginx": "SSL Certificate Error"},
    496: {"nginx": "SSL Certificate Required"},
    497: {"nginx": "HTTP Request Sent to HTTPS Port"},
    498: {"Esri": "Invalid Token"},
    499: {"nginx": "Client Closed Request", "Esri": "Token Required"},
    509: {"Apache": "Bandwidth Limit Exceeded", "cPanel": "Bandwidth Limit Exceeded"},
    520: {"Cloudflare": "Web Server Returned an Unknown Error"},
    521: {"Cloudflare": "Web Server is Down"},
    522: {"Cloudflare": "Connection Timed Out"},
    523: {"Cloudflare": "Origin is Unreachable"},
    524: {"Cloudflare": "A Timeout Occurred"},
    525: {"Cloudflare": "SSL Handshake Failed"},
    526: {"Cloudflare": "Invalid SSL Certificate"},
    527: {"Cloudflare": "Railgun Error"},
    529: {"Qualys": "Site is overloaded"},
    530: {"Pantheon": "Site is frozen"},
    598: {"HTTP Proxy": "Network read timeout error"},
}

_HTTP_STATUS_CODE_MAP: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_429_TOO_MANY_REQUESTS: "rate_limited",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "server_error",
    status.HTTP_501_NOT_IMPLEMENTED: "not_implemented",
}


def get_status_message(status_code: int, context: str | None = None) -> str | None:
    """Return the reason phrase of ``status_code``, or ``None`` if it has none.

    Registered codes resolve to their standard phrase. Vendor specific codes
    resolve to the phrase used by ``context`` or, without a matching
    context, to the first known vendor phrase.
    """

    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        pass
    vendors = _UNOFFICIAL_STATUS_MESSAGES.get(status_code)
    if not vendors:
        return None
    if context is not None and context in vendors:
        return vendors[context]
    return next(iter(vendors.values()))


class ApplicationError(Exception):
    """Base class for domain-specific errors.

    Carries a human readable ``message``, the originating ``cause`` (also
    chained as ``__cause__``) and an arbitrary structured ``detail``.
    """

    default_message = "Application error."

    def __init__(
        self,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
        detail: Any | None = None,
    ) -> None:
        resolved = message or self.default_message
        super().__init__(resolved)
        self.message = resolved
        self.cause = cause
        self.detail = detail
        if cause is not None:
            self.__cause__ = cause


class HttpStatusDetail:
    """Status code and status message pair attached to HTTP errors."""

    __slots__ = ("_status_code", "_message")

    def __init__(self, status_code: int = 500, message: str | None = None) -> None:
        self._status_code = self.check_status(status_code)
        self._message = self.check_message(message)

    @staticmethod
    def valid_status_code(status_code: object) -> bool:
        return (
            isinstance(status_code, int)
            and not isinstance(status_code, bool)
            and 0 <= status_code <= 599
        )

    @classmethod
    def check_status(cls, status_code: object) -> int:
        if not cls.valid_status_code(status_code):
            raise TypeError(f"Invalid status code {status_code!r}")
        return status_code  # type: ignore[return-value]

    @staticmethod
    def check_message(message: object) -> str | None:
        if message is None:
            return None
        if not isinstance(message, str) or not message.strip():
            raise TypeError(f"Invalid status message {message!r}")
        return message

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def message(self) -> str:
        if self._message is not None:
            return self._message
        return get_status_message(self._status_code) or UNKNOWN_STATUS_MESSAGE

    def as_dict(self) -> dict[str, Any]:
        return {"status_code": self.status_code, "status_message": self.message}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HttpStatusDetail):
            return NotImplemented
        return self.status_code == other.status_code and self.message == other.message

    def __repr__(self) -> str:
        return f"HttpStatusDetail(status_code={self.status_code}, message={self.message!r})"


class HttpStatusException(ApplicationError):
    """Error mapped directly onto an HTTP status code."""

    default_message = "HTTP error."

    def __init__(
        self,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        status_message: str | None = None,
        context: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            cause=cause,
            detail=HttpStatusDetail(status_code, status_message),
        )
        self.context = context

    @property
    def status_code(self) -> int:
        return self.detail.status_code

    @property
    def status_message(self) -> str:
        return self.detail.message

    @property
    def code(self) -> str:
        return _HTTP_STATUS_CODE_MAP.get(self.status_code, "http_error")


class NotFoundException(HttpStatusException):
    """The referenced entity does not exist."""

    default_message = "Resource not found."

    def __init__(
        self,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
        status_message: str | None = None,
        context: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            cause=cause,
            status_code=status.HTTP_404_NOT_FOUND,
            status_message=status_message,
            context=context,
        )


class AuthenticationRequiredException(HttpStatusException):
    """The session is missing or expired; the caller must authenticate again."""

    default_message = "Authentication required."

    def __init__(
        self,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
        status_message: str | None = None,
        context: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            cause=cause,
            status_code=status.HTTP_401_UNAUTHORIZED,
            status_message=status_message,
            context=context,
        )


class AccessForbiddenException(HttpStatusException):
    """Credentials were wrong or access to an existing entity is denied."""

    default_message = "Access forbidden."

    def __init__(
        self,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
        status_message: str | None = None,
        context: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            cause=cause,
            status_code=status.HTTP_403_FORBIDDEN,
            status_message=status_message,
            context=context,
        )


class BadRequestException(HttpStatusException):
    """The request was malformed or referenced mismatching entities."""

    default_message = "Bad request."

    def __init__(
        self,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
        status_message: str | None = None,
        context: Any | None = None,
    ) -> None:
        super().__init__(
            message,
            cause=cause,
            status_code=status.HTTP_400_BAD_REQUEST,
            status_message=status_message,
            context=context,
        )


class InvalidParameterException(ApplicationError):
    """A caller supplied argument failed validation."""

    default_message = "Invalid parameter."

    def __init__(
        self,
        parameter_name: str,
        parameter_value: Any | None = None,
        message: str | None = None,
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message or f"Invalid {parameter_name} value",
            cause=cause,
            detail={"parameter_name": parameter_name, "parameter_value": parameter_value},
        )

    @property
    def parameter_name(self) -> str:
        return self.detail["parameter_name"]

    @property
    def parameter_value(self) -> Any | None:
        return self.detail["parameter_value"]


class TaskCycleError(InvalidParameterException):
    """A task graph refers back to one of its own tasks."""

    def __init__(self, task_name: str, message: str | None = None) -> None:
        super().__init__(
            "completed_by",
            task_name,
            message or f"Task {task_name!r} is part of a dependency cycle",
        )


def _bind_request_context(request: Request) -> Token[RequestContext] | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return None
    return bind_request_id(request_id)


def _reset_request_context(token: Token[RequestContext] | None) -> None:
    if token is not None:
        reset_context(token)


def _merge_details_with_request(request: Request, details: Any | None) -> Any | None:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        if "request_id" not in details:
            return {**details, "request_id": request_id}
        return details
    return {"request_id": request_id, "detail": details}


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorEnvelope(
        code=code,
        message=message,
        details=_merge_details_with_request(request, details),
    )
    response = JSONResponse(status_code=status_code, content=payload.model_dump())
    if headers:
        response.headers.update(headers)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers.setdefault(REQUEST_ID_HEADER, request_id)
    return response


def _http_exception_details(status_code: int, detail: Any) -> tuple[str, Any | None]:
    if isinstance(detail, str):
        return detail, None
    phrase = get_status_message(status_code) or "Error"
    if detail is None:
        return phrase, None
    if isinstance(detail, list):
        return phrase, {"errors": detail}
    return phrase, detail


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the provided FastAPI app."""

    @app.exception_handler(HttpStatusException)
    async def _handle_http_status_exception(
        request: Request,
        exc: HttpStatusException,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "Application error encountered",
                extra={"code": exc.code, "status_code": exc.status_code},
            )
            details: dict[str, Any] = {"status_message": exc.status_message}
            if exc.context is not None:
                details["context"] = exc.context
            headers = None
            if exc.status_code == status.HTTP_401_UNAUTHORIZED:
                headers = {"WWW-Authenticate": "Session"}
            return _error_response(
                request,
                status_code=exc.status_code,
                code=exc.code,
                message=exc.message,
                details=details,
                headers=headers,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(InvalidParameterException)
    async def _handle_invalid_parameter(
        request: Request,
        exc: InvalidParameterException,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.warning(
                "Invalid parameter supplied",
                extra={"parameter_name": exc.parameter_name},
            )
            details: dict[str, Any] = {"parameter_name": exc.parameter_name}
            if exc.cause is not None:
                details["reason"] = str(exc.cause)
            return _error_response(
                request,
                status_code=status.HTTP_400_BAD_REQUEST,
                code="invalid_parameter",
                message=exc.message,
                details=details,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation_error(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.warning("Request validation failed", extra={"errors": exc.errors()})
            return _error_response(
                request,
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                code="validation_error",
                message="Request validation failed.",
                details={"errors": exc.errors()},
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_exception(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            code = _HTTP_STATUS_CODE_MAP.get(exc.status_code, "http_error")
            message, extra_details = _http_exception_details(exc.status_code, exc.detail)
            log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
            log(
                "HTTP exception raised",
                extra={"code": code, "status_code": exc.status_code, "path": str(request.url.path)},
            )
            return _error_response(
                request,
                status_code=exc.status_code,
                code=code,
                message=message,
                details=extra_details,
                headers=exc.headers or None,
            )
        finally:
            _reset_request_context(token)

    @app.exception_handler(Exception)
    async def _handle_unhandled_exception(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        token = _bind_request_context(request)
        try:
            logger.exception("Unhandled application error.")
            return _error_response(
                request,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                code="server_error",
                message="Internal server error.",
            )
        finally:
            _reset_request_context(token)


__all__ = [
    "AccessForbiddenException",
    "ApplicationError",
    "AuthenticationRequiredException",
    "BadRequestException",
    "HttpStatusDetail",
    "HttpStatusException",
    "InvalidParameterException",
    "NotFoundException",
    "TaskCycleError",
    "get_status_message",
    "register_exception_handlers",
]
