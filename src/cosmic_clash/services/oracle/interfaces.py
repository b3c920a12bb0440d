"""Oracle interface.

The engine depends only on this protocol so tests (and alternative backends)
can supply their own oracle without touching the orchestration code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from cosmic_clash.schemas.oracle import (
    Classification,
    Connection,
    ContestResult,
    Lore,
    Profile,
    RandomPair,
)


if TYPE_CHECKING:
    from cosmic_clash.services.path_resolver import ContestPath


class OracleProtocol(Protocol):
    """Protocol for the generative oracle.

    Every method may raise. Failures are raw (SDK, transport or parsing
    exceptions); callers classify them with ``classify_error``.
    """

    async def classify_entity(self, name: str) -> Classification:
        """Return the power classification for ``name``."""
        ...

    async def suggest_random_pair(self) -> RandomPair:
        """Suggest two distinct entities for a matchup."""
        ...

    async def run_contest(
        self, name1: str, name2: str, path: ContestPath
    ) -> ContestResult:
        """Decide a contest between two entities along ``path``."""
        ...

    async def fetch_profile(self, name: str) -> Profile:
        """Return a short character profile."""
        ...

    async def fetch_lore(self, name: str) -> Lore:
        """Return a lore summary."""
        ...

    async def fetch_connection(self, name1: str, name2: str) -> Connection:
        """Return the canonical lore connection between two entities."""
        ...

    async def generate_image(
        self, query: str, aspect_ratio: str, style: str, mood: str
    ) -> str:
        """Generate artwork and return it as a ``data:`` URI."""
        ...

    async def edit_image(
        self,
        query: str,
        edit_prompt: str,
        aspect_ratio: str,
        style: str,
        mood: str,
    ) -> str:
        """Regenerate artwork with a modification and return a ``data:`` URI."""
        ...
