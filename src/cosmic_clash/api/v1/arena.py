"""API endpoints for the arena session: slots, contests and secondary panels."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from cosmic_clash.core.exceptions import (
    ContestNotRunningError,
    ContestRejectedError,
    NoImageToEditError,
    NothingToExportError,
    SlotNotFoundError,
)
from cosmic_clash.dependencies.arena import ArenaDep
from cosmic_clash.schemas.api import ApiResponse, ErrorResponse
from cosmic_clash.schemas.arena import (
    ArenaSnapshot,
    ConnectionRequest,
    ExportBundle,
    ImageEditRequest,
    ImageOptions,
    SlotNameUpdate,
    ViewState,
    ViewUpdate,
)
from cosmic_clash.schemas.oracle import Connection, Lore, Profile, RandomPair
from cosmic_clash.services.oracle.errors import ClassifiedError


router = APIRouter(prefix="/arena", tags=["arena"])

ORACLE_FAILURE_RESPONSE = {
    502: {"model": ErrorResponse, "description": "The oracle call failed"},
}


def oracle_failure(error: ClassifiedError) -> JSONResponse:
    """Wrap a classified oracle failure in the error envelope."""
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=ErrorResponse(message=error.message, error=error.to_dict()).model_dump(),
    )


def _conflict(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


def _not_found(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get(
    "",
    summary="Arena snapshot",
    response_model=ApiResponse[ArenaSnapshot],
    response_model_by_alias=False,
)
async def get_arena_snapshot(arena: ArenaDep) -> ApiResponse[ArenaSnapshot]:
    return ApiResponse(data=arena.snapshot(), message="Arena state")


@router.put(
    "/slots/{slot_id}",
    summary="Edit a challenger name",
    response_model=ApiResponse[ArenaSnapshot],
    response_model_by_alias=False,
    description=(
        "Store the typed name and schedule a debounced classification. Any "
        "contest result and artwork are cleared."
    ),
)
async def update_slot(
    slot_id: int, body: SlotNameUpdate, arena: ArenaDep
) -> ApiResponse[ArenaSnapshot]:
    try:
        arena.set_name(slot_id, body.name)
    except SlotNotFoundError as e:
        raise _not_found(e) from e
    return ApiResponse(data=arena.snapshot(), message="Challenger updated")


@router.delete(
    "/slots/{slot_id}",
    summary="Clear a challenger",
    response_model=ApiResponse[ArenaSnapshot],
    response_model_by_alias=False,
)
async def clear_slot(slot_id: int, arena: ArenaDep) -> ApiResponse[ArenaSnapshot]:
    try:
        arena.clear_slot(slot_id)
    except SlotNotFoundError as e:
        raise _not_found(e) from e
    return ApiResponse(data=arena.snapshot(), message="Challenger cleared")


@router.post(
    "/random",
    summary="Random matchup",
    response_model=ApiResponse[RandomPair],
    response_model_by_alias=False,
    responses=ORACLE_FAILURE_RESPONSE,
)
async def random_matchup(arena: ArenaDep) -> ApiResponse[RandomPair] | JSONResponse:
    try:
        outcome = await arena.random_matchup()
    except ContestRejectedError as e:
        raise _conflict(e) from e
    if isinstance(outcome, ClassifiedError):
        return oracle_failure(outcome)
    return ApiResponse(data=outcome, message="Random matchup loaded")


@router.post(
    "/contest",
    summary="Start a contest",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ApiResponse[ArenaSnapshot],
    response_model_by_alias=False,
    responses={409: {"description": "Contest rejected in the current state"}},
)
async def start_contest(arena: ArenaDep) -> ApiResponse[ArenaSnapshot]:
    try:
        arena.start_contest()
    except ContestRejectedError as e:
        raise _conflict(e) from e
    return ApiResponse(data=arena.snapshot(), message="Contest started")


@router.post(
    "/contest/cancel",
    summary="Cancel the running contest",
    response_model=ApiResponse[ArenaSnapshot],
    response_model_by_alias=False,
    responses={409: {"description": "No contest is running"}},
)
async def cancel_contest(arena: ArenaDep) -> ApiResponse[ArenaSnapshot]:
    try:
        arena.cancel_contest()
    except ContestNotRunningError as e:
        raise _conflict(e) from e
    return ApiResponse(data=arena.snapshot(), message="Contest cancelled")


@router.delete(
    "/contest/error",
    summary="Dismiss the contest error",
    response_model=ApiResponse[ArenaSnapshot],
    response_model_by_alias=False,
)
async def dismiss_contest_error(arena: ArenaDep) -> ApiResponse[ArenaSnapshot]:
    arena.dismiss_error()
    return ApiResponse(data=arena.snapshot(), message="Error dismissed")


@router.put(
    "/image-options",
    summary="Set artwork options",
    response_model=ApiResponse[ImageOptions],
)
async def set_image_options(
    options: ImageOptions, arena: ArenaDep
) -> ApiResponse[ImageOptions]:
    return ApiResponse(data=arena.set_image_options(options), message="Image options set")


@router.put(
    "/view",
    summary="Update the result view",
    response_model=ApiResponse[ViewState],
)
async def update_view(update: ViewUpdate, arena: ArenaDep) -> ApiResponse[ViewState]:
    return ApiResponse(data=arena.update_view(update), message="View updated")


@router.get(
    "/profile/{name}",
    summary="Character profile",
    response_model=ApiResponse[Profile],
    response_model_by_alias=False,
    responses=ORACLE_FAILURE_RESPONSE,
)
async def get_profile(name: str, arena: ArenaDep) -> ApiResponse[Profile] | JSONResponse:
    outcome = await arena.profile(name)
    if isinstance(outcome, ClassifiedError):
        return oracle_failure(outcome)
    return ApiResponse(data=outcome, message="Profile loaded")


@router.get(
    "/lore/{name}",
    summary="Character lore",
    response_model=ApiResponse[Lore],
    response_model_by_alias=False,
    responses=ORACLE_FAILURE_RESPONSE,
)
async def get_lore(name: str, arena: ArenaDep) -> ApiResponse[Lore] | JSONResponse:
    outcome = await arena.lore(name)
    if isinstance(outcome, ClassifiedError):
        return oracle_failure(outcome)
    return ApiResponse(data=outcome, message="Lore loaded")


@router.post(
    "/connection",
    summary="Lore connection between the challengers",
    response_model=ApiResponse[Connection],
    response_model_by_alias=False,
    responses=ORACLE_FAILURE_RESPONSE,
)
async def get_connection(
    arena: ArenaDep, body: ConnectionRequest | None = None
) -> ApiResponse[Connection] | JSONResponse:
    body = body or ConnectionRequest()
    try:
        outcome = await arena.connection(body.name1, body.name2)
    except ContestRejectedError as e:
        raise _conflict(e) from e
    if isinstance(outcome, ClassifiedError):
        return oracle_failure(outcome)
    return ApiResponse(data=outcome, message="Lore connection loaded")


@router.post(
    "/images/{fighter}/edit",
    summary="Edit a fighter's artwork",
    response_model=ApiResponse[dict[str, str]],
    responses={
        **ORACLE_FAILURE_RESPONSE,
        404: {"description": "No artwork to edit"},
    },
)
async def edit_image(
    fighter: int, body: ImageEditRequest, arena: ArenaDep
) -> ApiResponse[dict[str, str]] | JSONResponse:
    if fighter not in (1, 2):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown fighter {fighter}; expected 1 or 2",
        )
    try:
        outcome = await arena.edit_image(fighter, body.edit_prompt)
    except NoImageToEditError as e:
        raise _not_found(e) from e
    if isinstance(outcome, ClassifiedError):
        return oracle_failure(outcome)
    return ApiResponse(data={"image": outcome}, message="Image updated")


@router.get(
    "/export",
    summary="Export the contest result",
    response_model=ApiResponse[ExportBundle],
    responses={409: {"description": "No complete contest to export"}},
)
async def export_result(arena: ArenaDep) -> ApiResponse[ExportBundle]:
    try:
        bundle = arena.export()
    except NothingToExportError as e:
        raise _conflict(e) from e
    return ApiResponse(data=bundle, message="Contest exported")
