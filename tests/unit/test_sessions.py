"""Unit tests for session stores (memory + Redis with AsyncMock)."""

from unittest.mock import AsyncMock

from src.bank_gateway.auth.sessions import (
    MemorySessionStore,
    RedisSessionStore,
    new_session_token,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_tokens_are_unique_and_opaque() -> None:
    tokens = {new_session_token() for _ in range(20)}
    assert len(tokens) == 20
    assert all(len(t) >= 40 for t in tokens)


class TestMemorySessionStore:
    async def test_create_and_resolve(self) -> None:
        store = MemorySessionStore(ttl_seconds=60)
        token = await store.create(7)
        assert await store.resolve(token) == 7

    async def test_unknown_token(self) -> None:
        assert await MemorySessionStore(ttl_seconds=60).resolve("nope") is None

    async def test_revoke(self) -> None:
        store = MemorySessionStore(ttl_seconds=60)
        token = await store.create(7)
        await store.revoke(token)
        assert await store.resolve(token) is None

    async def test_revoke_unknown_is_noop(self) -> None:
        await MemorySessionStore(ttl_seconds=60).revoke("nope")

    async def test_expires_after_ttl(self) -> None:
        clock = FakeClock()
        store = MemorySessionStore(ttl_seconds=60, clock=clock)
        token = await store.create(7)
        clock.now += 59
        assert await store.resolve(token) == 7
        clock.now += 1
        assert await store.resolve(token) is None

    async def test_use_does_not_extend_expiry(self) -> None:
        clock = FakeClock()
        store = MemorySessionStore(ttl_seconds=60, clock=clock)
        token = await store.create(7)
        clock.now += 30
        await store.resolve(token)
        clock.now += 30
        assert await store.resolve(token) is None


class TestRedisSessionStore:
    async def test_create_sets_key_with_ttl(self) -> None:
        redis = AsyncMock()
        store = RedisSessionStore(redis, ttl_seconds=86400)

        token = await store.create(42)

        redis.set.assert_awaited_once_with(f"session:{token}", "42", ex=86400)

    async def test_resolve_parses_account_id(self) -> None:
        redis = AsyncMock()
        redis.get.return_value = "42"
        store = RedisSessionStore(redis, ttl_seconds=60)

        assert await store.resolve("tok") == 42
        redis.get.assert_awaited_once_with("session:tok")

    async def test_resolve_missing(self) -> None:
        redis = AsyncMock()
        redis.get.return_value = None
        assert await RedisSessionStore(redis, 60).resolve("tok") is None

    async def test_resolve_garbage_value(self) -> None:
        redis = AsyncMock()
        redis.get.return_value = "not-an-int"
        assert await RedisSessionStore(redis, 60).resolve("tok") is None

    async def test_revoke_deletes_key(self) -> None:
        redis = AsyncMock()
        await RedisSessionStore(redis, 60).revoke("tok")
        redis.delete.assert_awaited_once_with("session:tok")
