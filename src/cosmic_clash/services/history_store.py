"""Capacity-bounded, newest-first record of completed contests."""

from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter, ValidationError

from cosmic_clash.crud.app_state import HISTORY_KEY, AppStateStore
from cosmic_clash.schemas.history import HistoryEntry


logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20

_entries_adapter = TypeAdapter(list[HistoryEntry])


class HistoryStore:
    """In-memory history mirrored to ``AppStateStore``.

    The in-memory list is authoritative. Persisted data that cannot be read
    back (invalid JSON, wrong shape, storage errors) is treated as empty.
    """

    def __init__(self, store: AppStateStore, capacity: int = DEFAULT_CAPACITY) -> None:
        self._store = store
        self._capacity = capacity
        self._entries: list[HistoryEntry] = []

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    @property
    def capacity(self) -> int:
        return self._capacity

    async def load(self) -> list[HistoryEntry]:
        raw = await self._store.read(HISTORY_KEY)
        if not raw:
            self._entries = []
            return self.entries
        try:
            entries = _entries_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                f"Could not load contest history, starting empty: {e.error_count()} "
                "invalid field(s)"
            )
            entries = []
        self._entries = entries[: self._capacity]
        return self.entries

    def get(self, entry_id: str) -> HistoryEntry | None:
        return next((e for e in self._entries if e.id == entry_id), None)

    async def append(self, name1: str, name2: str, winner: str) -> HistoryEntry:
        """Record a completed contest, evicting the oldest beyond capacity."""
        entry = HistoryEntry(name1=name1, name2=name2, winner=winner)
        self._entries = [entry, *self._entries][: self._capacity]
        await self._persist()
        return entry

    async def clear(self) -> None:
        self._entries = []
        await self._store.remove(HISTORY_KEY)

    async def _persist(self) -> None:
        payload = json.dumps(
            [e.model_dump(by_alias=True) for e in self._entries],
        )
        await self._store.write(HISTORY_KEY, payload)
