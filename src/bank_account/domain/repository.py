"""Store Protocols: dependency inversion for testability.

One capability set, two implementations:
  - infrastructure/persistence.py: PostgreSQL (production)
  - infrastructure/memory.py: in-process dicts (tests, STORAGE_BACKEND=memory)

Every read and write goes through a unit of work. Leaving the
``unit_of_work()`` block normally commits; leaving it with an exception rolls
everything back, so a failed operation never leaves a partial balance change
or an orphan ledger row.

``for_update=True`` locks the account until the unit of work ends. Callers
that lock several accounts must lock them in ascending id order.
"""

from contextlib import AbstractAsyncContextManager
from decimal import Decimal
from typing import Any, Protocol

from src.bank_account.domain.models import Account, LedgerEntry, NewLedgerEntry


class BankUnitOfWorkProtocol(Protocol):
    async def get(self, account_id: int, *, for_update: bool = False) -> Account | None: ...

    async def get_by_username(
        self, username: str, *, for_update: bool = False
    ) -> Account | None: ...

    async def insert(
        self, username: str, credential_hash: str, balance: Decimal
    ) -> Account: ...

    async def update(self, account_id: int, **fields: Any) -> Account: ...

    async def append(self, entry: NewLedgerEntry) -> LedgerEntry: ...

    async def list_by_account(self, account_id: int) -> list[LedgerEntry]: ...


class BankStoreProtocol(Protocol):
    def unit_of_work(self) -> AbstractAsyncContextManager[BankUnitOfWorkProtocol]: ...


# Columns update() may touch. id, username and created_at are immutable.
UPDATABLE_FIELDS = frozenset({"credential_hash", "balance", "login_attempts", "is_locked"})

# Largest balance NUMERIC(12, 2) can hold; both stores refuse anything above it.
MAX_BALANCE = Decimal("9999999999.99")
