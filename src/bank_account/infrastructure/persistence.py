"""SqlBankStore: PostgreSQL implementation of BankStoreProtocol.

One unit of work == one database transaction on its own AsyncSession.
``for_update=True`` issues ``SELECT ... FOR UPDATE`` so concurrent
read-validate-write sequences on the same account are serialized by the
row lock until COMMIT/ROLLBACK.

The CHECK (balance >= 0) constraint on ``accounts`` is the final guard; the
balance engine never relies on it.
"""

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bank_account.domain.models import Account, LedgerEntry, NewLedgerEntry
from src.bank_account.domain.repository import UPDATABLE_FIELDS
from src.bank_common.errors import AccountNotFoundError, InternalError, UsernameExistsError

# ---------------------------------------------------------------------------
# SQL: accounts
# ---------------------------------------------------------------------------

_ACCOUNT_COLUMNS = "id, username, credential_hash, balance, login_attempts, is_locked, created_at"

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :account_id
""")

_GET_ACCOUNT_FOR_UPDATE_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :account_id
    FOR UPDATE
""")

_GET_BY_USERNAME_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE username = :username
""")

_GET_BY_USERNAME_FOR_UPDATE_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE username = :username
    FOR UPDATE
""")

_INSERT_ACCOUNT_SQL = text(f"""
    INSERT INTO accounts (username, credential_hash, balance, login_attempts, is_locked)
    VALUES (:username, :credential_hash, :balance, 0, FALSE)
    RETURNING {_ACCOUNT_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: ledger_entries (append-only)
# ---------------------------------------------------------------------------

_LEDGER_COLUMNS = (
    "id, account_id, kind, amount, description, counterparty_username, metadata, created_at"
)

_INSERT_LEDGER_SQL = text(f"""
    INSERT INTO ledger_entries
        (account_id, kind, amount, description, counterparty_username, metadata)
    VALUES
        (:account_id, :kind, :amount, :description, :counterparty_username,
         CAST(:metadata AS JSONB))
    RETURNING {_LEDGER_COLUMNS}
""")

_LIST_LEDGER_SQL = text(f"""
    SELECT {_LEDGER_COLUMNS}
    FROM ledger_entries
    WHERE account_id = :account_id
    ORDER BY created_at DESC, id DESC
""")


def _row_to_account(row: object) -> Account:
    return Account(
        id=row.id,  # type: ignore[attr-defined]
        username=row.username,  # type: ignore[attr-defined]
        credential_hash=row.credential_hash,  # type: ignore[attr-defined]
        balance=Decimal(row.balance),  # type: ignore[attr-defined]
        login_attempts=row.login_attempts,  # type: ignore[attr-defined]
        is_locked=row.is_locked,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    metadata = row.metadata  # type: ignore[attr-defined]
    if isinstance(metadata, str):
        metadata = json.loads(metadata)
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        account_id=row.account_id,  # type: ignore[attr-defined]
        kind=row.kind,  # type: ignore[attr-defined]
        amount=Decimal(row.amount),  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        counterparty_username=row.counterparty_username,  # type: ignore[attr-defined]
        metadata=metadata,
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class SqlUnitOfWork:
    """Repository bound to one open transaction."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get(self, account_id: int, *, for_update: bool = False) -> Account | None:
        sql = _GET_ACCOUNT_FOR_UPDATE_SQL if for_update else _GET_ACCOUNT_SQL
        result = await self._db.execute(sql, {"account_id": account_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def get_by_username(
        self, username: str, *, for_update: bool = False
    ) -> Account | None:
        sql = _GET_BY_USERNAME_FOR_UPDATE_SQL if for_update else _GET_BY_USERNAME_SQL
        result = await self._db.execute(sql, {"username": username})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def insert(
        self, username: str, credential_hash: str, balance: Decimal
    ) -> Account:
        try:
            # SAVEPOINT keeps the outer transaction usable after a unique violation
            async with self._db.begin_nested():
                result = await self._db.execute(
                    _INSERT_ACCOUNT_SQL,
                    {
                        "username": username,
                        "credential_hash": credential_hash,
                        "balance": balance,
                    },
                )
        except IntegrityError:
            raise UsernameExistsError() from None
        row = result.fetchone()
        if row is None:
            raise InternalError("Account insert returned no rows")
        return _row_to_account(row)

    async def update(self, account_id: int, **fields: Any) -> Account:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        if not fields:
            account = await self.get(account_id)
            if account is None:
                raise AccountNotFoundError(account_id)
            return account
        # Column names come from the UPDATABLE_FIELDS whitelist, values are bound
        assignments = ", ".join(f"{name} = :{name}" for name in sorted(fields))
        sql = text(f"""
            UPDATE accounts
            SET {assignments}
            WHERE id = :account_id
            RETURNING {_ACCOUNT_COLUMNS}
        """)
        try:
            result = await self._db.execute(sql, {"account_id": account_id, **fields})
        except IntegrityError as exc:
            raise InternalError(f"Account {account_id} update violated a constraint") from exc
        except DataError as exc:
            # NUMERIC(12, 2) overflow
            raise InternalError(f"Account {account_id} update is out of range") from exc
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(account_id)
        return _row_to_account(row)

    async def append(self, entry: NewLedgerEntry) -> LedgerEntry:
        result = await self._db.execute(
            _INSERT_LEDGER_SQL,
            {
                "account_id": entry.account_id,
                "kind": entry.kind.value,
                "amount": entry.amount,
                "description": entry.description,
                "counterparty_username": entry.counterparty_username,
                "metadata": json.dumps(entry.metadata) if entry.metadata else None,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_ledger(row)

    async def list_by_account(self, account_id: int) -> list[LedgerEntry]:
        result = await self._db.execute(_LIST_LEDGER_SQL, {"account_id": account_id})
        return [_row_to_ledger(row) for row in result.fetchall()]


class SqlBankStore:
    """Opens one session + transaction per unit of work."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[SqlUnitOfWork]:
        async with self._session_factory() as db:
            async with db.begin():
                yield SqlUnitOfWork(db)
