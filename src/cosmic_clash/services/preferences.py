"""Theme and first-visit intro preferences."""

from __future__ import annotations

import logging

from cosmic_clash.crud.app_state import INTRO_SEEN_KEY, THEME_KEY, AppStateStore
from cosmic_clash.schemas.preferences import Preferences, Theme


logger = logging.getLogger(__name__)


class PreferencesStore:
    """Preferences cached in memory and mirrored to ``AppStateStore``."""

    def __init__(self, store: AppStateStore, default_theme: Theme = Theme.DARK) -> None:
        self._store = store
        self._preferences = Preferences(theme=default_theme)

    @property
    def preferences(self) -> Preferences:
        return self._preferences.model_copy()

    async def load(self) -> Preferences:
        theme = await self._store.read(THEME_KEY)
        intro = await self._store.read(INTRO_SEEN_KEY)
        if theme is not None:
            try:
                self._preferences.theme = Theme(theme)
            except ValueError:
                logger.warning(f"Ignoring unknown stored theme '{theme}'")
        self._preferences.intro_seen = intro == "true"
        return self.preferences

    async def set_theme(self, theme: Theme) -> Preferences:
        self._preferences.theme = theme
        await self._store.write(THEME_KEY, theme.value)
        return self.preferences

    async def toggle_theme(self) -> Preferences:
        next_theme = Theme.LIGHT if self._preferences.theme is Theme.DARK else Theme.DARK
        return await self.set_theme(next_theme)

    async def dismiss_intro(self) -> Preferences:
        self._preferences.intro_seen = True
        await self._store.write(INTRO_SEEN_KEY, "true")
        return self.preferences
