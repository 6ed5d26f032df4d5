"""Pydantic schemas for the banking, services and games APIs.

Request amounts arrive as JSON numbers or strings and are parsed into
Decimal here; bounds are enforced by the balance engine. Every money value
leaving the API is a fixed two-digit string.
"""

from decimal import Decimal
from typing import Any

from pydantic import Field

from src.bank_account.domain.models import Account, LedgerEntry
from src.bank_common.datetime_utils import to_iso
from src.bank_common.money import amount_to_display, format_amount
from src.bank_common.schemas import CamelModel

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class WithdrawRequest(CamelModel):
    amount: Decimal = Field(..., description="Amount to withdraw, 10.00-5000.00")


class DepositRequest(CamelModel):
    amount: Decimal = Field(..., description="Amount to deposit, 10.00-10000.00")


class TransferRequest(CamelModel):
    recipient_username: str = Field(..., min_length=1, max_length=64)
    amount: Decimal
    note: str | None = Field(None, max_length=200)


class MobileRechargeRequest(CamelModel):
    phone_number: str
    operator: str
    amount: Decimal


class StreamingRequest(CamelModel):
    service: str = Field(..., min_length=1)
    # Echo of the catalog price shown to the user; never trusted for charging
    price: Decimal | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountSummary(CamelModel):
    id: int
    username: str
    balance: str

    @classmethod
    def from_account(cls, account: Account) -> "AccountSummary":
        return cls(id=account.id, username=account.username, balance=format_amount(account.balance))


class BalanceResponse(CamelModel):
    balance: str
    balance_display: str

    @classmethod
    def from_amount(cls, balance: Decimal) -> "BalanceResponse":
        return cls(balance=format_amount(balance), balance_display=amount_to_display(balance))


class OperationResponse(CamelModel):
    new_balance: str
    amount: str

    @classmethod
    def from_result(cls, new_balance: Decimal, amount: Decimal) -> "OperationResponse":
        return cls(new_balance=format_amount(new_balance), amount=format_amount(amount))


class TransferResponse(OperationResponse):
    recipient: str
    note: str | None = None


class MobileRechargeResponse(OperationResponse):
    phone_number: str
    operator: str


class StreamingResponse(OperationResponse):
    service: str


class StreamingCatalogItem(CamelModel):
    id: str
    name: str
    price: str


class SpinResponse(CamelModel):
    result: int
    outcome: str
    cost: str
    applied: str
    new_balance: str
    message: str


class LedgerEntryItem(CamelModel):
    id: int
    kind: str
    amount: str
    signed_amount: str
    description: str
    counterparty_username: str | None
    metadata: dict[str, Any] | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=entry.id,
            kind=entry.kind,
            amount=format_amount(entry.amount),
            signed_amount=format_amount(entry.signed_amount),
            description=entry.description,
            counterparty_username=entry.counterparty_username,
            metadata=entry.metadata,
            created_at=to_iso(entry.created_at),
        )


class TransactionsResponse(CamelModel):
    transactions: list[LedgerEntryItem]
