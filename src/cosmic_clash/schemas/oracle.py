"""Structured records produced by the oracle.

The oracle answers in free-form text. Once a JSON object has been extracted
from that text (see ``services.oracle.normalizer``) it is validated against
one of these models. Field aliases match the camelCase keys requested in the
oracle prompts; Python code uses the snake_case names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Source(BaseModel):
    """A grounding source reported alongside an oracle answer."""

    uri: str
    title: str = ""


class BypassCategory(str, Enum):
    POWER_NULLIFICATION = "Power Nullification"
    RESISTANCE_NEGATION = "Resistance Negation"
    CAUSALITY_NEGATION = "Causality and Reality Negation"


_CATEGORY_KEYWORDS: tuple[tuple[str, BypassCategory], ...] = (
    ("nullif", BypassCategory.POWER_NULLIFICATION),
    ("resist", BypassCategory.RESISTANCE_NEGATION),
    ("causal", BypassCategory.CAUSALITY_NEGATION),
    ("reality", BypassCategory.CAUSALITY_NEGATION),
)


class BypassAbility(BaseModel):
    """An ability that defeats conventional tier comparison ("hax")."""

    category: BypassCategory | str
    type: str
    description: str = ""

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, v: object) -> object:
        """Accept looser spellings of the three categories; keep anything else as text."""
        if isinstance(v, str):
            lowered = v.lower()
            for keyword, category in _CATEGORY_KEYWORDS:
                if keyword in lowered:
                    return category
        return v


class Classification(BaseModel):
    """Power classification of one entity."""

    tier_value: float = Field(..., alias="tierValue", ge=0, le=11)
    tier_label: str = Field(..., alias="tier")
    tier_name: str = Field(..., alias="tierName")
    justification: str
    bypass_abilities: list[BypassAbility] = Field(
        default_factory=list, alias="tierNegatingAbilities"
    )
    sources: list[Source] | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("bypass_abilities", mode="before")
    @classmethod
    def _null_as_empty(cls, v: object) -> object:
        return [] if v is None else v

    @property
    def has_bypass(self) -> bool:
        return len(self.bypass_abilities) > 0


class Confidence(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class FighterStats(BaseModel):
    strength: int
    speed: int
    durability: int
    intelligence: int
    energy_projection: int = Field(..., alias="energyProjection")
    fighting_skills: int = Field(..., alias="fightingSkills")

    model_config = ConfigDict(populate_by_name=True)


class Fighter(BaseModel):
    name: str
    stats: FighterStats
    image_query: str = Field("", alias="imageSearchQuery")

    model_config = ConfigDict(populate_by_name=True)


class ContestAnalysis(BaseModel):
    strength: str = ""
    speed: str = ""
    durability: str = ""
    intelligence: str = ""
    abilities: str = ""
    conclusion: str = ""


class ContestResult(BaseModel):
    """Verdict of a contest between two entities."""

    winner: str
    loser: str = ""
    verdict_summary: str = Field("", alias="verdictSummary")
    confidence: Confidence = Confidence.LOW
    confidence_score: int = Field(0, alias="confidenceScore")
    confidence_justification: str = Field("", alias="confidenceJustification")
    analysis: ContestAnalysis = Field(default_factory=ContestAnalysis)
    nlf_considerations: str | None = Field(None, alias="nlfConsiderations")
    fighter1: Fighter
    fighter2: Fighter
    sources: list[Source] | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("confidence", mode="before")
    @classmethod
    def _normalize_confidence(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().capitalize()
        return v

    @field_validator("confidence_score", mode="before")
    @classmethod
    def _round_score(cls, v: object) -> object:
        if isinstance(v, float):
            return round(v)
        return v


class ProfileAbility(BaseModel):
    name: str
    description: str = ""


class Profile(BaseModel):
    """Short character profile shown in the profile panel."""

    name: str = ""
    summary: str
    archetypes: list[str] = Field(default_factory=list)
    abilities: list[ProfileAbility] = Field(default_factory=list)
    image_query: str = Field("", alias="imageSearchQuery")
    sources: list[Source] | None = None

    model_config = ConfigDict(populate_by_name=True)


class Lore(BaseModel):
    name: str = ""
    lore: str
    sources: list[Source] | None = None


class SharedCharacter(BaseModel):
    name: str
    relationship: str = ""


class KeyEvent(BaseModel):
    event: str
    description: str = ""


class Connection(BaseModel):
    """Canonical lore connection (or lack of one) between two entities."""

    connection_exists: bool = Field(..., alias="connectionExists")
    summary: str
    shared_universe: str | None = Field(None, alias="sharedUniverse")
    shared_allies: list[SharedCharacter] = Field(
        default_factory=list, alias="sharedAllies"
    )
    shared_enemies: list[SharedCharacter] = Field(
        default_factory=list, alias="sharedEnemies"
    )
    key_events: list[KeyEvent] = Field(default_factory=list, alias="keyEvents")
    sources: list[Source] | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator(
        "shared_allies", "shared_enemies", "key_events", mode="before"
    )
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class RandomPair(BaseModel):
    name1: str = Field(..., alias="fighter1", min_length=1)
    name2: str = Field(..., alias="fighter2", min_length=1)

    model_config = ConfigDict(populate_by_name=True)
