"""Shared test fixtures for pytest.

``ENVIRONMENT`` is forced to ``test`` before any application module is
imported so settings never read a local ``.env`` file.
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import StaticPool


os.environ["ENVIRONMENT"] = "test"

from cosmic_clash.core.config import Settings, get_settings
from cosmic_clash.crud.app_state import AppStateStore
from cosmic_clash.dependencies.db import build_engine, build_session_factory, init_models
from cosmic_clash.services.arena import Arena
from cosmic_clash.services.history_store import HistoryStore
from cosmic_clash.services.preferences import PreferencesStore
from factories import FakeOracle


get_settings.cache_clear()


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with timings shrunk so engine tests run in milliseconds."""
    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        ENVIRONMENT="test",
        CLASSIFY_DEBOUNCE_SECONDS=0.01,
        CLASSIFICATION_ERROR_TTL_SECONDS=0.05,
        CONTEST_COOLDOWN_SECONDS=0,
        LOADING_MESSAGE_INTERVAL_SECONDS=0.01,
    )


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def app_state_store(db_engine: AsyncEngine) -> AppStateStore:
    return AppStateStore(build_session_factory(db_engine))


@pytest.fixture
def history_store(app_state_store: AppStateStore) -> HistoryStore:
    return HistoryStore(app_state_store, capacity=20)


@pytest.fixture
def preferences_store(app_state_store: AppStateStore) -> PreferencesStore:
    return PreferencesStore(app_state_store)


@pytest_asyncio.fixture
async def arena(
    oracle: FakeOracle,
    history_store: HistoryStore,
    preferences_store: PreferencesStore,
    fast_settings: Settings,
) -> AsyncGenerator[Arena, None]:
    arena = Arena(oracle, history_store, preferences_store, fast_settings)  # type: ignore[arg-type]
    await arena.load()
    yield arena
    arena.cancel_all()
