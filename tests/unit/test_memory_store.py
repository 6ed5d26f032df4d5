"""Unit tests for MemoryBankStore: commit/rollback, uniqueness, row locks."""

import asyncio
from decimal import Decimal

import pytest

from src.bank_account.domain.models import NewLedgerEntry
from src.bank_account.domain.repository import MAX_BALANCE
from src.bank_account.infrastructure.memory import MemoryBankStore
from src.bank_common.enums import LedgerKind
from src.bank_common.errors import AccountNotFoundError, InternalError, UsernameExistsError


async def _insert(store: MemoryBankStore, username: str, balance: str = "100.00") -> int:
    async with store.unit_of_work() as uow:
        account = await uow.insert(username, "hash", Decimal(balance))
    return account.id


class TestInsert:
    async def test_ids_are_sequential(self, store: MemoryBankStore) -> None:
        assert await _insert(store, "alice") == 1
        assert await _insert(store, "bob") == 2

    async def test_new_account_defaults(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice", "250.00")
        async with store.unit_of_work() as uow:
            account = await uow.get(account_id)
        assert account is not None
        assert account.balance == Decimal("250.00")
        assert account.login_attempts == 0
        assert account.is_locked is False
        assert account.created_at is not None

    async def test_duplicate_username(self, store: MemoryBankStore) -> None:
        await _insert(store, "alice")
        with pytest.raises(UsernameExistsError):
            await _insert(store, "alice")

    async def test_usernames_are_case_sensitive(self, store: MemoryBankStore) -> None:
        await _insert(store, "alice")
        await _insert(store, "Alice")

    async def test_lookup_by_username(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        async with store.unit_of_work() as uow:
            account = await uow.get_by_username("alice")
            missing = await uow.get_by_username("nobody")
        assert account is not None and account.id == account_id
        assert missing is None


class TestUnitOfWork:
    async def test_commit_publishes_writes(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        async with store.unit_of_work() as uow:
            await uow.update(account_id, balance=Decimal("90.00"))
            await uow.append(
                NewLedgerEntry(account_id, LedgerKind.WITHDRAW, Decimal("10.00"), "Cash withdrawal")
            )

        async with store.unit_of_work() as uow:
            account = await uow.get(account_id)
            entries = await uow.list_by_account(account_id)
        assert account is not None and account.balance == Decimal("90.00")
        assert [e.kind for e in entries] == ["withdraw"]

    async def test_exception_rolls_back_everything(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        with pytest.raises(RuntimeError):
            async with store.unit_of_work() as uow:
                await uow.update(account_id, balance=Decimal("0.00"))
                await uow.append(
                    NewLedgerEntry(account_id, LedgerKind.WITHDRAW, Decimal("100.00"), "x")
                )
                raise RuntimeError("boom")

        async with store.unit_of_work() as uow:
            account = await uow.get(account_id)
            entries = await uow.list_by_account(account_id)
        assert account is not None and account.balance == Decimal("100.00")
        assert entries == []

    async def test_rolled_back_insert_frees_username(self, store: MemoryBankStore) -> None:
        with pytest.raises(RuntimeError):
            async with store.unit_of_work() as uow:
                await uow.insert("alice", "hash", Decimal("100.00"))
                raise RuntimeError("boom")
        await _insert(store, "alice")

    async def test_reads_see_own_staged_writes(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        async with store.unit_of_work() as uow:
            await uow.update(account_id, balance=Decimal("42.00"))
            account = await uow.get(account_id)
        assert account is not None and account.balance == Decimal("42.00")

    async def test_returned_accounts_are_copies(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        async with store.unit_of_work() as uow:
            account = await uow.get(account_id)
        assert account is not None
        account.balance = Decimal("1.00")
        async with store.unit_of_work() as uow:
            fresh = await uow.get(account_id)
        assert fresh is not None and fresh.balance == Decimal("100.00")

    async def test_update_rejects_unknown_fields(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        with pytest.raises(ValueError):
            async with store.unit_of_work() as uow:
                await uow.update(account_id, username="mallory")

    async def test_update_missing_account(self, store: MemoryBankStore) -> None:
        with pytest.raises(AccountNotFoundError):
            async with store.unit_of_work() as uow:
                await uow.update(99, balance=Decimal("1.00"))

    async def test_negative_balance_refused(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        with pytest.raises(InternalError):
            async with store.unit_of_work() as uow:
                await uow.update(account_id, balance=Decimal("-0.01"))

    async def test_append_to_missing_account(self, store: MemoryBankStore) -> None:
        with pytest.raises(AccountNotFoundError):
            async with store.unit_of_work() as uow:
                await uow.append(NewLedgerEntry(99, LedgerKind.DEPOSIT, Decimal("10.00"), "x"))

    async def test_ledger_is_newest_first(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        for description in ("first", "second", "third"):
            async with store.unit_of_work() as uow:
                await uow.append(
                    NewLedgerEntry(account_id, LedgerKind.DEPOSIT, Decimal("10.00"), description)
                )
        async with store.unit_of_work() as uow:
            entries = await uow.list_by_account(account_id)
        assert [e.description for e in entries] == ["third", "second", "first"]

    async def test_ledger_is_per_account(self, store: MemoryBankStore) -> None:
        alice = await _insert(store, "alice")
        bob = await _insert(store, "bob")
        async with store.unit_of_work() as uow:
            await uow.append(NewLedgerEntry(alice, LedgerKind.DEPOSIT, Decimal("10.00"), "a"))
        async with store.unit_of_work() as uow:
            assert await uow.list_by_account(bob) == []


class TestRowLocks:
    async def test_for_update_serializes_units_of_work(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        order: list[str] = []
        first_holds_lock = asyncio.Event()

        async def first() -> None:
            async with store.unit_of_work() as uow:
                await uow.get(account_id, for_update=True)
                first_holds_lock.set()
                await asyncio.sleep(0.01)
                order.append("first")

        async def second() -> None:
            await first_holds_lock.wait()
            async with store.unit_of_work() as uow:
                await uow.get(account_id, for_update=True)
                order.append("second")

        await asyncio.gather(first(), second())
        assert order == ["first", "second"]

    async def test_locked_reader_sees_committed_value(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        first_holds_lock = asyncio.Event()
        seen: list[Decimal] = []

        async def writer() -> None:
            async with store.unit_of_work() as uow:
                account = await uow.get(account_id, for_update=True)
                first_holds_lock.set()
                await asyncio.sleep(0.01)
                assert account is not None
                await uow.update(account_id, balance=account.balance - Decimal("30.00"))

        async def reader() -> None:
            await first_holds_lock.wait()
            async with store.unit_of_work() as uow:
                account = await uow.get(account_id, for_update=True)
                assert account is not None
                seen.append(account.balance)

        await asyncio.gather(writer(), reader())
        assert seen == [Decimal("70.00")]

    async def test_lock_released_on_rollback(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        with pytest.raises(RuntimeError):
            async with store.unit_of_work() as uow:
                await uow.get(account_id, for_update=True)
                raise RuntimeError("boom")

        async with asyncio.timeout(1):
            async with store.unit_of_work() as uow:
                assert await uow.get(account_id, for_update=True) is not None

    async def test_relocking_same_row_is_reentrant(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        async with asyncio.timeout(1):
            async with store.unit_of_work() as uow:
                await uow.get(account_id, for_update=True)
                await uow.get(account_id, for_update=True)


class TestBalanceCeiling:
    async def test_balance_above_column_limit_refused(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        with pytest.raises(InternalError, match="out of range"):
            async with store.unit_of_work() as uow:
                await uow.update(account_id, balance=MAX_BALANCE + Decimal("0.01"))

        async with store.unit_of_work() as uow:
            account = await uow.get(account_id)
        assert account is not None and account.balance == Decimal("100.00")

    async def test_balance_at_column_limit_allowed(self, store: MemoryBankStore) -> None:
        account_id = await _insert(store, "alice")
        async with store.unit_of_work() as uow:
            account = await uow.update(account_id, balance=MAX_BALANCE)
        assert account.balance == Decimal("9999999999.99")
