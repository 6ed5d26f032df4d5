"""Auth API router: register, login, logout, me.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware). Login and register set the session
cookie; logout revokes the session and clears the cookie.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from config.settings import settings
from src.bank_account.application.schemas import AccountSummary
from src.bank_common.response import ApiResponse, success_response
from src.bank_gateway.auth.dependencies import (
    SESSION_TTL_SECONDS,
    get_current_account_id,
    get_session_store,
    get_session_token,
    get_user_service,
)
from src.bank_gateway.auth.sessions import SessionStoreProtocol
from src.bank_gateway.user.schemas import LoginRequest, RegisterRequest
from src.bank_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Account registration",
)
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    service: Annotated[UserService, Depends(get_user_service)],
    sessions: Annotated[SessionStoreProtocol, Depends(get_session_store)],
) -> ApiResponse:
    account = await service.register(body.username, body.pin, body.confirm_pin)
    _set_session_cookie(response, await sessions.create(account.id))

    resp = success_response(AccountSummary.from_account(account).to_wire())
    resp.request_id = _get_request_id(request)
    resp.message = "Account registered successfully"
    return resp


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="PIN login",
)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    service: Annotated[UserService, Depends(get_user_service)],
    sessions: Annotated[SessionStoreProtocol, Depends(get_session_store)],
) -> ApiResponse:
    account = await service.login(body.username, body.pin)
    _set_session_cookie(response, await sessions.create(account.id))

    resp = success_response(AccountSummary.from_account(account).to_wire())
    resp.request_id = _get_request_id(request)
    resp.message = "Login successful"
    return resp


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Logout",
)
async def logout(
    request: Request,
    response: Response,
    token: Annotated[str | None, Depends(get_session_token)],
    sessions: Annotated[SessionStoreProtocol, Depends(get_session_store)],
) -> ApiResponse:
    if token:
        await sessions.revoke(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)

    resp = success_response()
    resp.request_id = _get_request_id(request)
    resp.message = "Logged out"
    return resp


@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Current account",
)
async def me(
    request: Request,
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[UserService, Depends(get_user_service)],
) -> ApiResponse:
    account = await service.get_account(account_id)
    resp = success_response(AccountSummary.from_account(account).to_wire())
    resp.request_id = _get_request_id(request)
    return resp
