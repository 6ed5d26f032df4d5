"""FastAPI dependencies for the balance engine.

The store backend is picked by ``settings.STORAGE_BACKEND``. Tests replace
``get_bank_store`` / ``get_random_source`` through ``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from config.settings import settings
from src.bank_account.application.service import BankingService
from src.bank_account.domain.repository import BankStoreProtocol
from src.bank_account.infrastructure.memory import MemoryBankStore
from src.bank_account.infrastructure.persistence import SqlBankStore
from src.bank_common.random_source import RandomSourceProtocol, SystemRandomSource


@lru_cache
def _memory_store() -> MemoryBankStore:
    return MemoryBankStore()


@lru_cache
def _sql_store() -> SqlBankStore:
    from src.bank_common.database import async_session_factory

    return SqlBankStore(async_session_factory)


def get_bank_store() -> BankStoreProtocol:
    if settings.STORAGE_BACKEND == "memory":
        return _memory_store()
    return _sql_store()


@lru_cache
def get_random_source() -> RandomSourceProtocol:
    return SystemRandomSource()


def get_banking_service(
    store: Annotated[BankStoreProtocol, Depends(get_bank_store)],
    rng: Annotated[RandomSourceProtocol, Depends(get_random_source)],
) -> BankingService:
    return BankingService(store, rng)
