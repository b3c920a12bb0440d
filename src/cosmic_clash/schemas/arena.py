"""Arena session schemas: image options, view state, request bodies and the
snapshot returned by the arena endpoints."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from cosmic_clash.schemas.oracle import BypassAbility, Classification, ContestResult


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT = "3:4"
    LANDSCAPE = "4:3"
    TALL = "9:16"
    WIDE = "16:9"


class ImageStyle(str, Enum):
    DEFAULT = "default"
    ANIME = "anime"
    PHOTOREALISTIC = "photorealistic"
    COMIC_BOOK = "comic book art"
    FANTASY = "fantasy art"
    CEL_SHADED = "cel-shaded"
    PIXEL_ART = "pixel art"


class ImageMood(str, Enum):
    DEFAULT = "default"
    EPIC_BATTLE = "epic battle"
    DARK_AND_GRITTY = "dark and gritty"
    HEROIC = "heroic"
    MYSTERIOUS = "mysterious"
    SERENE = "serene"
    DYNAMIC_ACTION = "dynamic action"


class ImageOptions(BaseModel):
    """Artwork options applied to every generated or edited image."""

    aspect_ratio: AspectRatio = AspectRatio.PORTRAIT
    style: ImageStyle = ImageStyle.DEFAULT
    mood: ImageMood = ImageMood.DEFAULT


class ResultView(str, Enum):
    SUMMARY = "summary"
    STATS = "stats"
    TIER = "tier"
    ANALYSIS = "analysis"
    SOURCES = "sources"


class StatTab(str, Enum):
    CHART = "chart"
    TABLE = "table"


class ImageEditTarget(BaseModel):
    """Artwork currently open in the image editor."""

    fighter: int = Field(..., ge=1, le=2)
    fighter_name: str
    original_query: str
    image: str
    aspect_ratio: AspectRatio
    style: ImageStyle
    mood: ImageMood


class ViewState(BaseModel):
    active_view: ResultView = ResultView.SUMMARY
    active_stat_tab: StatTab = StatTab.CHART
    expanded_analysis_source: str | None = None
    lore_connection_open: bool = False
    image_editor: ImageEditTarget | None = None


# Request bodies


class SlotNameUpdate(BaseModel):
    name: str = Field("", max_length=200, description="Raw slot text as typed")


class ViewUpdate(BaseModel):
    """Partial view update. Omitted fields are left unchanged."""

    active_view: ResultView | None = None
    active_stat_tab: StatTab | None = None
    toggle_analysis_source: str | None = Field(
        None, description="Expand this analysis section, or collapse it if open"
    )
    close_image_editor: bool = False
    close_lore_connection: bool = False


class ImageEditRequest(BaseModel):
    edit_prompt: str = Field(..., min_length=1, max_length=1000)


class ConnectionRequest(BaseModel):
    """Names to connect; defaults to the current slot names."""

    name1: str | None = None
    name2: str | None = None


# Snapshot


class SlotView(BaseModel):
    slot_id: int
    name: str
    validation_error: str | None = None
    classification: Classification | None = None
    classification_error: dict[str, str] | None = None
    is_classifying: bool = False
    tier_description: str | None = None
    bypass_by_category: dict[str, list[BypassAbility]] = Field(default_factory=dict)


class ContestView(BaseModel):
    phase: str
    last_outcome: str | None = None
    generation: int
    cooldown_remaining: int
    loading_message: str | None = None
    result: ContestResult | None = None
    images: dict[int, str | None]
    error: dict[str, str] | None = None


class ArenaSnapshot(BaseModel):
    slots: list[SlotView]
    path: str
    ready: bool
    contest: ContestView
    view: ViewState
    image_options: ImageOptions


class ExportBundle(BaseModel):
    filename: str
    data: dict[str, Any]
