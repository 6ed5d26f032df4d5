"""Games API: wheel of fortune."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.bank_account.api.dependencies import get_banking_service
from src.bank_account.application.service import BankingService
from src.bank_common.response import ApiResponse, success_response
from src.bank_gateway.auth.dependencies import get_current_account_id

router = APIRouter(prefix="/games", tags=["games"])


@router.post("/wheel")
async def spin_wheel(
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[BankingService, Depends(get_banking_service)],
    request: Request,
) -> ApiResponse:
    data = await service.spin_wheel(account_id)
    resp = success_response(data.to_wire(), message=data.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
