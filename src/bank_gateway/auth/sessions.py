"""Login sessions: opaque cookie token -> account id, fixed expiry.

Two interchangeable stores:
  - RedisSessionStore: ``SET session:<token> <account_id> EX <ttl>`` (production)
  - MemorySessionStore: process-local dict (tests, SESSION_BACKEND=memory)

Expiry is measured from creation; sessions are not refreshed on use.
"""

import secrets
import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as aioredis

_KEY_PREFIX = "session:"


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


class SessionStoreProtocol(Protocol):
    async def create(self, account_id: int) -> str: ...

    async def resolve(self, token: str) -> int | None: ...

    async def revoke(self, token: str) -> None: ...


class RedisSessionStore:
    def __init__(self, redis: aioredis.Redis, ttl_seconds: int) -> None:
        self._redis = redis
        self._ttl = ttl_seconds

    async def create(self, account_id: int) -> str:
        token = new_session_token()
        await self._redis.set(f"{_KEY_PREFIX}{token}", str(account_id), ex=self._ttl)
        return token

    async def resolve(self, token: str) -> int | None:
        value = await self._redis.get(f"{_KEY_PREFIX}{token}")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    async def revoke(self, token: str) -> None:
        await self._redis.delete(f"{_KEY_PREFIX}{token}")


class MemorySessionStore:
    def __init__(
        self,
        ttl_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, tuple[int, float]] = {}

    async def create(self, account_id: int) -> str:
        token = new_session_token()
        self._sessions[token] = (account_id, self._clock() + self._ttl)
        return token

    async def resolve(self, token: str) -> int | None:
        session = self._sessions.get(token)
        if session is None:
            return None
        account_id, expires_at = session
        if self._clock() >= expires_at:
            del self._sessions[token]
            return None
        return account_id

    async def revoke(self, token: str) -> None:
        self._sessions.pop(token, None)
