"""Routes handling registration, login and logout."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response, status

from ...core.session import get_session_ids, login_user, logout_user
from ...deps import ApiServiceDependency
from ...errors import ApplicationError
from ...models import UserInfo
from ...schemas.auth import CredentialsRequest, LoginResponse, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


async def _close_cookie_session(request: Request, service: ApiServiceDependency) -> None:
    ids = get_session_ids(request.session)
    logout_user(request.session)
    if ids is None:
        return
    _, session_id = ids
    try:
        await service.close_session(session_id)
    except ApplicationError as exc:
        # The cookie may outlive the process that issued it.
        logger.info("Stale session cookie ignored", extra={"reason": exc.message})


@router.post(
    "/register",
    response_model=UserInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(payload: RegisterRequest, service: ApiServiceDependency) -> UserInfo:
    return await service.register(payload.user, payload.secret, payload.user_info)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in with user name and secret",
)
async def login(
    payload: CredentialsRequest,
    request: Request,
    service: ApiServiceDependency,
) -> LoginResponse:
    await _close_cookie_session(request, service)
    user, session = await service.login(payload.user, payload.secret)
    login_user(request.session, user.id, session.id)
    return LoginResponse(user_info=user.user_info, expires=session.expires)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Close the current session",
)
async def logout(request: Request, service: ApiServiceDependency) -> Response:
    await _close_cookie_session(request, service)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
