"""Contest path resolution.

A contest path is derived from the two slot classifications and decides
whether a contest may start and which framing the oracle receives. Nothing
here touches state; every function is pure.
"""

from __future__ import annotations

from enum import Enum

from cosmic_clash.schemas.oracle import BypassAbility, BypassCategory, Classification


class ContestPath(str, Enum):
    MORTAL_PLANETARY = "Mortal & Planetary (Tiers 11-6)"
    COSMIC_GALACTIC = "Cosmic & Galactic (Tiers 5-3)"
    UNIVERSAL_MULTIVERSAL = "Universal & Multiversal (Tiers 2-1)"
    BOUNDLESS = "Boundless (Tier 0)"
    CROSS_TIER_HAX = "Cross-Tier Hax Battle"
    MISMATCH = "Mismatch"
    PENDING = "Pending Analysis"


# Lower bound of each band, checked top to bottom.
_BAND_FLOORS: tuple[tuple[float, ContestPath], ...] = (
    (6, ContestPath.MORTAL_PLANETARY),
    (3, ContestPath.COSMIC_GALACTIC),
    (1, ContestPath.UNIVERSAL_MULTIVERSAL),
    (0, ContestPath.BOUNDLESS),
)

TIER_DESCRIPTIONS: dict[ContestPath, str] = {
    ContestPath.BOUNDLESS: (
        "Boundless: Beings who are beyond all concepts of space, time, and "
        "dimensionality, possessing true omnipotence or its equivalent."
    ),
    ContestPath.UNIVERSAL_MULTIVERSAL: (
        "Universal / Multiversal: Capable of creating, destroying, or "
        "significantly affecting structures on the scale of a single universe "
        "or multiple universes."
    ),
    ContestPath.COSMIC_GALACTIC: (
        "Cosmic / Galactic: Power to destroy or create galaxies, solar systems, "
        "or other large-scale cosmic structures."
    ),
    ContestPath.MORTAL_PLANETARY: (
        "Mortal / Planetary: Power ranging from the ability to destroy planets "
        "down to continents, islands, or cities."
    ),
}
UNKNOWN_TIER_DESCRIPTION = "Tier could not be determined."


def band_for_tier(tier_value: float) -> ContestPath:
    """Map a tier value to its band. Negative values have no band."""
    for floor, band in _BAND_FLOORS:
        if tier_value >= floor:
            return band
    return ContestPath.PENDING


def resolve(
    first: Classification | None, second: Classification | None
) -> ContestPath:
    """Resolve the contest path for two (possibly missing) classifications."""
    if first is None or second is None:
        return ContestPath.PENDING

    band1 = band_for_tier(first.tier_value)
    band2 = band_for_tier(second.tier_value)
    if band1 == band2:
        return band1

    if first.has_bypass or second.has_bypass:
        return ContestPath.CROSS_TIER_HAX
    return ContestPath.MISMATCH


def is_ready(path: ContestPath) -> bool:
    """Whether a contest may start along ``path``."""
    return path not in (ContestPath.PENDING, ContestPath.MISMATCH)


def describe_tier(tier_value: float) -> str:
    """One-line description of the band containing ``tier_value``."""
    return TIER_DESCRIPTIONS.get(band_for_tier(tier_value), UNKNOWN_TIER_DESCRIPTION)


def abilities_by_category(
    abilities: list[BypassAbility] | None,
) -> dict[BypassCategory, list[BypassAbility]]:
    """Group bypass abilities under their category, keeping every category key."""
    grouped: dict[BypassCategory, list[BypassAbility]] = {
        category: [] for category in BypassCategory
    }
    for ability in abilities or []:
        # Off-list categories still count as bypass but belong to no group.
        if isinstance(ability.category, BypassCategory):
            grouped[ability.category].append(ability)
    return grouped
