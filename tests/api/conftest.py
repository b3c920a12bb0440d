"""HTTP client wired to the application with the arena dependency overridden."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cosmic_clash.dependencies.arena import get_arena
from cosmic_clash.main import app
from cosmic_clash.services.arena import Arena


@pytest_asyncio.fixture
async def client(arena: Arena) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_arena] = lambda: arena
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.pop(get_arena, None)
