"""FastAPI dependencies: session store, get_current_account_id, user service.

Usage in any protected router:
    from src.bank_gateway.auth.dependencies import get_current_account_id

    @router.get("/protected")
    async def protected(account_id: int = Depends(get_current_account_id)):
        ...
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from config.settings import settings
from src.bank_account.api.dependencies import get_bank_store, get_random_source
from src.bank_account.domain.repository import BankStoreProtocol
from src.bank_common.errors import NotAuthenticatedError
from src.bank_common.random_source import RandomSourceProtocol
from src.bank_common.redis_client import get_redis
from src.bank_gateway.auth.sessions import (
    MemorySessionStore,
    RedisSessionStore,
    SessionStoreProtocol,
)
from src.bank_gateway.user.service import UserService

SESSION_TTL_SECONDS = settings.SESSION_TTL_HOURS * 3600


@lru_cache
def _memory_sessions() -> MemorySessionStore:
    return MemorySessionStore(SESSION_TTL_SECONDS)


async def get_session_store() -> SessionStoreProtocol:
    if settings.SESSION_BACKEND == "memory":
        return _memory_sessions()
    return RedisSessionStore(await get_redis(), SESSION_TTL_SECONDS)


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_current_account_id(
    token: Annotated[str | None, Depends(get_session_token)],
    sessions: Annotated[SessionStoreProtocol, Depends(get_session_store)],
) -> int:
    """Resolve the session cookie to an account id.

    Raises NotAuthenticatedError (401) if the cookie is missing, unknown or expired.
    """
    if not token:
        raise NotAuthenticatedError()
    account_id = await sessions.resolve(token)
    if account_id is None:
        raise NotAuthenticatedError()
    return account_id


def get_user_service(
    store: Annotated[BankStoreProtocol, Depends(get_bank_store)],
    rng: Annotated[RandomSourceProtocol, Depends(get_random_source)],
) -> UserService:
    return UserService(store, rng)
