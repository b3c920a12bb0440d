"""API endpoints for contest history."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from cosmic_clash.core.exceptions import HistoryEntryNotFoundError
from cosmic_clash.dependencies.arena import ArenaDep
from cosmic_clash.schemas.api import ApiResponse
from cosmic_clash.schemas.history import HistoryEntry


router = APIRouter(prefix="/history", tags=["history"])


@router.get(
    "",
    summary="List contest history",
    response_model=ApiResponse[list[HistoryEntry]],
    response_model_by_alias=False,
)
async def list_history(arena: ArenaDep) -> ApiResponse[list[HistoryEntry]]:
    """Return recorded contests, newest first."""
    return ApiResponse(data=arena.history.entries, message="History loaded")


@router.delete(
    "",
    summary="Clear contest history",
    response_model=ApiResponse[list[HistoryEntry]],
    response_model_by_alias=False,
)
async def clear_history(arena: ArenaDep) -> ApiResponse[list[HistoryEntry]]:
    await arena.history.clear()
    return ApiResponse(data=[], message="History cleared")


@router.post(
    "/{entry_id}/rerun",
    summary="Load a past matchup into the arena",
    response_model=ApiResponse[HistoryEntry],
    response_model_by_alias=False,
    responses={404: {"description": "History entry not found"}},
)
async def rerun_history_entry(
    entry_id: str, arena: ArenaDep
) -> ApiResponse[HistoryEntry]:
    try:
        entry = await arena.rerun(entry_id)
    except HistoryEntryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return ApiResponse(data=entry, message="Matchup loaded")
