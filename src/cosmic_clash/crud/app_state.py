"""CRUD operations for persisted key/value session state."""

from __future__ import annotations

import logging

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cosmic_clash.models.app_state import AppState


logger = logging.getLogger(__name__)

HISTORY_KEY = "cosmic-clash-history"
THEME_KEY = "cosmic-clash-theme"
INTRO_SEEN_KEY = "cosmic-clash-intro-seen"


class AppStateCRUD:
    """CRUD operations for app state records."""

    async def get(self, db: AsyncSession, key: str) -> str | None:
        """Get the stored value for ``key``."""
        record = await db.get(AppState, key)
        return record.value if record is not None else None

    async def set(self, db: AsyncSession, key: str, value: str) -> AppState:
        """Create or replace the value for ``key``."""
        record = await db.get(AppState, key)
        if record is None:
            record = AppState(key=key, value=value)
            db.add(record)
        else:
            record.value = value
        await db.commit()
        await db.refresh(record)
        return record

    async def delete(self, db: AsyncSession, key: str) -> bool:
        """Delete the value for ``key``."""
        result = await db.execute(delete(AppState).where(AppState.key == key))
        await db.commit()
        return bool(result.rowcount)


# Create singleton instance
app_state_crud = AppStateCRUD()


class AppStateStore:
    """Session-owning facade used by the in-memory stores.

    Reads never raise: a storage failure is logged and reported as "absent".
    Writes return whether they succeeded so callers can keep their in-memory
    state authoritative either way.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def read(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                return await app_state_crud.get(session, key)
        except SQLAlchemyError as e:
            logger.warning(f"Could not read '{key}' from storage: {e}")
            return None

    async def write(self, key: str, value: str) -> bool:
        try:
            async with self._session_factory() as session:
                await app_state_crud.set(session, key, value)
        except SQLAlchemyError as e:
            logger.warning(f"Could not save '{key}' to storage: {e}")
            return False
        return True

    async def remove(self, key: str) -> bool:
        try:
            async with self._session_factory() as session:
                await app_state_crud.delete(session, key)
        except SQLAlchemyError as e:
            logger.warning(f"Could not remove '{key}' from storage: {e}")
            return False
        return True
