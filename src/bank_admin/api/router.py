"""Admin REST API: account unlock.

Lockout never expires by itself; an operator clears it here. Requests must
carry ``X-Admin-Token`` matching ``settings.ADMIN_TOKEN``; with no token
configured every request is refused.
"""

import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request

from config.settings import settings
from src.bank_account.application.schemas import AccountSummary
from src.bank_common.errors import AdminTokenError
from src.bank_common.response import ApiResponse, success_response
from src.bank_gateway.auth.dependencies import get_user_service
from src.bank_gateway.user.service import UserService

router = APIRouter(prefix="/admin", tags=["admin"])


async def require_admin_token(
    x_admin_token: Annotated[str | None, Header(alias="X-Admin-Token")] = None,
) -> None:
    expected = settings.ADMIN_TOKEN
    if not expected or not x_admin_token:
        raise AdminTokenError()
    if not secrets.compare_digest(x_admin_token.encode(), expected.encode()):
        raise AdminTokenError()


@router.post("/accounts/{username}/unlock", dependencies=[Depends(require_admin_token)])
async def unlock_account(
    username: str,
    service: Annotated[UserService, Depends(get_user_service)],
    request: Request,
) -> ApiResponse:
    account = await service.unlock(username)
    resp = success_response(AccountSummary.from_account(account).to_wire(), message="Account unlocked")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
