"""History records of completed contests."""

from __future__ import annotations

import time
import uuid

from pydantic import BaseModel, ConfigDict, Field


def _now_ms() -> int:
    return int(time.time() * 1000)


class HistoryEntry(BaseModel):
    """One completed contest. Persisted with the ``fighter1``/``fighter2`` keys."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name1: str = Field(..., alias="fighter1")
    name2: str = Field(..., alias="fighter2")
    winner: str
    timestamp: int = Field(
        default_factory=_now_ms, description="Epoch milliseconds"
    )

    model_config = ConfigDict(populate_by_name=True)
