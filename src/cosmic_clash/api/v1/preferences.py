"""API endpoints for theme and intro preferences."""

from __future__ import annotations

from fastapi import APIRouter

from cosmic_clash.dependencies.arena import ArenaDep
from cosmic_clash.schemas.api import ApiResponse
from cosmic_clash.schemas.preferences import Preferences, ThemeUpdate


router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=ApiResponse[Preferences])
async def get_preferences(arena: ArenaDep) -> ApiResponse[Preferences]:
    return ApiResponse(data=arena.preferences.preferences, message="Preferences loaded")


@router.put("/theme", response_model=ApiResponse[Preferences])
async def set_theme(body: ThemeUpdate, arena: ArenaDep) -> ApiResponse[Preferences]:
    preferences = await arena.preferences.set_theme(body.theme)
    return ApiResponse(data=preferences, message="Theme updated")


@router.post("/theme/toggle", response_model=ApiResponse[Preferences])
async def toggle_theme(arena: ArenaDep) -> ApiResponse[Preferences]:
    preferences = await arena.preferences.toggle_theme()
    return ApiResponse(data=preferences, message="Theme updated")


@router.post("/intro/dismiss", response_model=ApiResponse[Preferences])
async def dismiss_intro(arena: ArenaDep) -> ApiResponse[Preferences]:
    preferences = await arena.preferences.dismiss_intro()
    return ApiResponse(data=preferences, message="Intro dismissed")
