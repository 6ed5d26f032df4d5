"""Domain models for bank_account: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.bank_common.enums import DEBIT_KINDS, LedgerKind


@dataclass
class Account:
    id: int
    username: str
    credential_hash: str
    balance: Decimal            # two fractional digits, never negative
    login_attempts: int = 0
    is_locked: bool = False
    created_at: datetime | None = None


@dataclass(frozen=True)
class NewLedgerEntry:
    """Ledger row about to be appended (no id / timestamp yet)."""

    account_id: int
    kind: LedgerKind
    amount: Decimal
    description: str
    counterparty_username: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class LedgerEntry:
    id: int                          # BIGSERIAL, insertion order
    account_id: int
    kind: str                        # LedgerKind value
    amount: Decimal                  # magnitude, signed only for game rows
    description: str
    counterparty_username: str | None = None
    metadata: dict[str, Any] | None = field(default=None, hash=False)
    created_at: datetime | None = None

    @property
    def signed_amount(self) -> Decimal:
        """Balance delta this entry represents."""
        if LedgerKind(self.kind) in DEBIT_KINDS:
            return -self.amount
        return self.amount
