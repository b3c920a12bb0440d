"""Database engine and session factory using SQLAlchemy async engine.

The engine isn't connected until first use, so importing this module
won't fail if the database file doesn't exist yet.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cosmic_clash.core.config import get_settings
from cosmic_clash.models import Base


def _load_env_files() -> None:  # pragma: no cover - side-effect only
    # Load .env then .env.dev from the working directory or any parent of it
    for fname in (".env", ".env.dev"):
        for p in (Path.cwd(), *Path.cwd().parents):
            candidate = p / fname
            if candidate.exists():
                load_dotenv(dotenv_path=candidate, override=False)
                return


def _get_database_url() -> str:
    if get_settings().ENVIRONMENT != "test":
        _load_env_files()
    return os.getenv("DATABASE_URL") or get_settings().DATABASE_URL


def build_engine(url: str | None = None, **kwargs: Any) -> AsyncEngine:
    return create_async_engine(
        url or _get_database_url(), future=True, echo=False, **kwargs
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        class_=AsyncSession,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
