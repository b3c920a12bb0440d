"""Arena dependency.

The arena is created once in the application lifespan and stored on
``app.state``; routes receive it through ``ArenaDep``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from cosmic_clash.services.arena import Arena


def get_arena(request: Request) -> Arena:
    arena: Arena | None = getattr(request.app.state, "arena", None)
    if arena is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Arena is not initialized",
        )
    return arena


ArenaDep = Annotated[Arena, Depends(get_arena)]
