"""Bill-pay style services: mobile recharge and streaming subscriptions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.bank_account.api.dependencies import get_banking_service
from src.bank_account.application.schemas import MobileRechargeRequest, StreamingRequest
from src.bank_account.application.service import BankingService
from src.bank_common.response import ApiResponse, success_response
from src.bank_gateway.auth.dependencies import get_current_account_id

router = APIRouter(prefix="/services", tags=["services"])


@router.post("/mobile-recharge")
async def mobile_recharge(
    body: MobileRechargeRequest,
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[BankingService, Depends(get_banking_service)],
    request: Request,
) -> ApiResponse:
    data = await service.mobile_recharge(account_id, body.phone_number, body.operator, body.amount)
    resp = success_response(data.to_wire(), message="Recharge successful")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/streaming")
async def streaming_catalog(
    service: Annotated[BankingService, Depends(get_banking_service)],
    request: Request,
) -> ApiResponse:
    data = [item.to_wire() for item in service.streaming_catalog()]
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/streaming")
async def pay_streaming(
    body: StreamingRequest,
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[BankingService, Depends(get_banking_service)],
    request: Request,
) -> ApiResponse:
    data = await service.pay_streaming(account_id, body.service, body.price)
    resp = success_response(data.to_wire(), message="Subscription activated")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
