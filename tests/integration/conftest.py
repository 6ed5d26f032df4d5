"""API-test fixtures.

The app runs in-process through ASGITransport with its store, session store
and random source replaced via ``app.dependency_overrides``, so every test
starts from an empty bank.
"""

from collections.abc import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.bank_account.api.dependencies import get_bank_store, get_random_source
from src.bank_account.infrastructure.memory import MemoryBankStore
from src.bank_common.random_source import SequenceRandomSource
from src.bank_gateway.auth.dependencies import get_session_store
from src.bank_gateway.auth.sessions import MemorySessionStore
from src.main import app

Register = Callable[..., Awaitable[dict]]


@pytest_asyncio.fixture
async def client(
    store: MemoryBankStore,
    sessions: MemorySessionStore,
    rng: SequenceRandomSource,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to fresh in-memory backends."""
    app.dependency_overrides[get_bank_store] = lambda: store
    app.dependency_overrides[get_session_store] = lambda: sessions
    app.dependency_overrides[get_random_source] = lambda: rng
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def other_client(client: AsyncClient) -> AsyncIterator[AsyncClient]:
    """Second browser: same app and backends, separate cookie jar."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register(rng: SequenceRandomSource) -> Register:
    """Register through the API with a known opening balance; logs the client in."""

    async def _register(
        client: AsyncClient, username: str, pin: str = "1234", opening: int = 500
    ) -> dict:
        rng.push(opening)
        resp = await client.post(
            "/api/auth/register",
            json={"username": username, "pin": pin, "confirmPin": pin},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _register
