"""Async engine and session factory for the PostgreSQL store.

Imported lazily (only when STORAGE_BACKEND is not "memory"), so the
in-memory backend never needs asyncpg or a reachable database. SqlBankStore
opens one session + transaction per unit of work from ``async_session_factory``.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
