"""Shared test fixtures.

The whole suite runs on the in-process backends: accounts and ledger in
MemoryBankStore, sessions in MemorySessionStore. The environment is set
before ``config.settings`` is first imported.
"""

import os

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SESSION_BACKEND", "memory")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from collections.abc import Awaitable, Callable  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from src.bank_account.domain.models import Account  # noqa: E402
from src.bank_account.infrastructure.memory import MemoryBankStore  # noqa: E402
from src.bank_common.random_source import SequenceRandomSource  # noqa: E402
from src.bank_gateway.auth.password import hash_pin  # noqa: E402
from src.bank_gateway.auth.sessions import MemorySessionStore  # noqa: E402

SeedAccount = Callable[..., Awaitable[Account]]


@pytest.fixture
def store() -> MemoryBankStore:
    return MemoryBankStore()


@pytest.fixture
def rng() -> SequenceRandomSource:
    return SequenceRandomSource()


@pytest.fixture
def sessions() -> MemorySessionStore:
    return MemorySessionStore(ttl_seconds=24 * 3600)


@pytest.fixture
def seed(store: MemoryBankStore) -> SeedAccount:
    """Insert an account directly into ``store``, bypassing registration."""

    async def _seed(username: str, balance: str = "100.00", pin: str = "1234") -> Account:
        async with store.unit_of_work() as uow:
            return await uow.insert(username, hash_pin(pin), Decimal(balance))

    return _seed
