"""Tests for the history endpoints."""

import pytest
from httpx import AsyncClient

from cosmic_clash.services.arena import Arena


class TestHistoryApi:
    @pytest.mark.asyncio
    async def test_list_newest_first(self, client: AsyncClient, arena: Arena) -> None:
        await arena.history.append("Goku", "Superman", "Goku")
        await arena.history.append("Thor", "Hulk", "Thor")

        response = await client.get("/api/v1/history")

        assert response.status_code == 200
        assert [h["winner"] for h in response.json()["data"]] == ["Thor", "Goku"]

    @pytest.mark.asyncio
    async def test_clear(self, client: AsyncClient, arena: Arena) -> None:
        await arena.history.append("Goku", "Superman", "Goku")

        response = await client.delete("/api/v1/history")

        assert response.json()["data"] == []
        assert arena.history.entries == []

    @pytest.mark.asyncio
    async def test_rerun_loads_slots(self, client: AsyncClient, arena: Arena) -> None:
        entry = await arena.history.append("Thor", "Hulk", "Thor")

        response = await client.post(f"/api/v1/history/{entry.id}/rerun")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == entry.id
        assert [slot.name for slot in arena.slots.slots] == ["Thor", "Hulk"]

    @pytest.mark.asyncio
    async def test_rerun_unknown_is_404(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/history/missing/rerun")

        assert response.status_code == 404
        assert "missing" in response.json()["message"]
