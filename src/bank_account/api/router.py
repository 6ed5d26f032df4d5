"""Banking REST API: balance, withdraw, deposit, transfer, transactions.

All endpoints require a valid session cookie.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.bank_account.api.dependencies import get_banking_service
from src.bank_account.application.schemas import (
    DepositRequest,
    TransferRequest,
    WithdrawRequest,
)
from src.bank_account.application.service import BankingService
from src.bank_common.response import ApiResponse, success_response
from src.bank_gateway.auth.dependencies import get_current_account_id

router = APIRouter(prefix="/banking", tags=["banking"])


@router.get("/balance")
async def get_balance(
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[BankingService, Depends(get_banking_service)],
    request: Request,
) -> ApiResponse:
    data = await service.get_balance(account_id)
    resp = success_response(data.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/withdraw")
async def withdraw(
    body: WithdrawRequest,
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[BankingService, Depends(get_banking_service)],
    request: Request,
) -> ApiResponse:
    data = await service.withdraw(account_id, body.amount)
    resp = success_response(data.to_wire(), message="Withdrawal successful")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/deposit")
async def deposit(
    body: DepositRequest,
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[BankingService, Depends(get_banking_service)],
    request: Request,
) -> ApiResponse:
    data = await service.deposit(account_id, body.amount)
    resp = success_response(data.to_wire(), message="Deposit successful")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/transfer")
async def transfer(
    body: TransferRequest,
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[BankingService, Depends(get_banking_service)],
    request: Request,
) -> ApiResponse:
    data = await service.transfer(account_id, body.recipient_username, body.amount, body.note)
    resp = success_response(data.to_wire(), message="Transfer successful")
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/transactions")
async def list_transactions(
    account_id: Annotated[int, Depends(get_current_account_id)],
    service: Annotated[BankingService, Depends(get_banking_service)],
    request: Request,
) -> ApiResponse:
    data = await service.list_transactions(account_id)
    resp = success_response(data.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
