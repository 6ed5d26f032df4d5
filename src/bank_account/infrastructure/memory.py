"""MemoryBankStore: in-process implementation of BankStoreProtocol.

Used by the test-suite and by ``STORAGE_BACKEND=memory`` for local runs.
State lives in plain dicts owned by the store. A unit of work stages every
write on copies and publishes them only on commit; ``for_update`` takes a
per-account ``asyncio.Lock`` that is held until the unit of work ends.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from decimal import Decimal
from typing import Any

from src.bank_account.domain.models import Account, LedgerEntry, NewLedgerEntry
from src.bank_account.domain.repository import MAX_BALANCE, UPDATABLE_FIELDS
from src.bank_common.datetime_utils import utc_now
from src.bank_common.errors import AccountNotFoundError, InternalError, UsernameExistsError


class MemoryBankStore:
    def __init__(self) -> None:
        self._accounts: dict[int, Account] = {}
        self._ids_by_username: dict[str, int] = {}
        self._entries: list[LedgerEntry] = []
        self._locks: dict[int, asyncio.Lock] = {}
        self._next_account_id = 1
        self._next_entry_id = 1

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator["MemoryUnitOfWork"]:
        uow = MemoryUnitOfWork(self)
        try:
            yield uow
        except BaseException:
            uow.release()
            raise
        try:
            uow.commit()
        finally:
            uow.release()

    def _lock_for(self, account_id: int) -> asyncio.Lock:
        return self._locks.setdefault(account_id, asyncio.Lock())

    def _allocate_account_id(self) -> int:
        account_id = self._next_account_id
        self._next_account_id += 1
        return account_id

    def _allocate_entry_id(self) -> int:
        entry_id = self._next_entry_id
        self._next_entry_id += 1
        return entry_id


class MemoryUnitOfWork:
    def __init__(self, store: MemoryBankStore) -> None:
        self._store = store
        self._staged: dict[int, Account] = {}
        self._inserted: dict[str, int] = {}
        self._entries: list[LedgerEntry] = []
        self._held: list[int] = []

    def _current(self, account_id: int) -> Account | None:
        if account_id in self._staged:
            return self._staged[account_id]
        return self._store._accounts.get(account_id)

    async def get(self, account_id: int, *, for_update: bool = False) -> Account | None:
        if self._current(account_id) is None:
            return None
        if for_update and account_id not in self._held:
            await self._store._lock_for(account_id).acquire()
            self._held.append(account_id)
        account = self._current(account_id)
        return replace(account) if account else None

    async def get_by_username(
        self, username: str, *, for_update: bool = False
    ) -> Account | None:
        account_id = self._inserted.get(username, self._store._ids_by_username.get(username))
        if account_id is None:
            return None
        return await self.get(account_id, for_update=for_update)

    async def insert(
        self, username: str, credential_hash: str, balance: Decimal
    ) -> Account:
        if username in self._inserted or username in self._store._ids_by_username:
            raise UsernameExistsError()
        account = Account(
            id=self._store._allocate_account_id(),
            username=username,
            credential_hash=credential_hash,
            balance=balance,
            login_attempts=0,
            is_locked=False,
            created_at=utc_now(),
        )
        self._staged[account.id] = account
        self._inserted[username] = account.id
        return replace(account)

    async def update(self, account_id: int, **fields: Any) -> Account:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        current = self._current(account_id)
        if current is None:
            raise AccountNotFoundError(account_id)
        if "balance" in fields and fields["balance"] < 0:
            # Mirrors the CHECK (balance >= 0) constraint of the SQL schema
            raise InternalError(f"Balance of account {account_id} would become negative")
        if "balance" in fields and fields["balance"] > MAX_BALANCE:
            # Mirrors the NUMERIC(12, 2) column limit
            raise InternalError(f"Account {account_id} update is out of range")
        updated = replace(current, **fields)
        self._staged[account_id] = updated
        return replace(updated)

    async def append(self, entry: NewLedgerEntry) -> LedgerEntry:
        if self._current(entry.account_id) is None:
            raise AccountNotFoundError(entry.account_id)
        row = LedgerEntry(
            id=self._store._allocate_entry_id(),
            account_id=entry.account_id,
            kind=str(entry.kind.value),
            amount=entry.amount,
            description=entry.description,
            counterparty_username=entry.counterparty_username,
            metadata=dict(entry.metadata) if entry.metadata else None,
            created_at=utc_now(),
        )
        self._entries.append(row)
        return row

    async def list_by_account(self, account_id: int) -> list[LedgerEntry]:
        rows = [e for e in self._store._entries if e.account_id == account_id]
        rows += [e for e in self._entries if e.account_id == account_id]
        return sorted(rows, key=lambda e: (e.created_at, e.id), reverse=True)

    def commit(self) -> None:
        store = self._store
        for username in self._inserted:
            if username in store._ids_by_username:
                raise UsernameExistsError()
        store._accounts.update(self._staged)
        store._ids_by_username.update(self._inserted)
        store._entries.extend(self._entries)

    def release(self) -> None:
        while self._held:
            self._store._lock_for(self._held.pop()).release()
