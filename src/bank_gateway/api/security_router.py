"""Security API: PIN change."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.bank_common.response import ApiResponse, success_response
from src.bank_gateway.auth.dependencies import get_current_account_id, get_user_service
from src.bank_gateway.user.schemas import ChangePinRequest
from src.bank_gateway.user.service import UserService

router = APIRouter(prefix="/security", tags=["security"])


@router.post("/change-pin")
async def change_pin(
    body: ChangePinRequest,
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[UserService, Depends(get_user_service)],
    request: Request,
) -> ApiResponse:
    await service.change_pin(account_id, body.current_pin, body.new_pin, body.confirm_pin)
    resp = success_response(message="PIN updated successfully")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
