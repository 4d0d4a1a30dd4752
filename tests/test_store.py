"""Tests for the durable key/value store."""

from __future__ import annotations

import pytest

from app.database import Database
from app.services.store import DurableStore


@pytest.mark.anyio("asyncio")
async def test_set_get_and_remove(store: DurableStore) -> None:
    assert await store.get("shows") is None
    assert await store.get("shows", default=[]) == []

    await store.set("favoriteShows", [2, 1])
    await store.set("favoriteShows", [2])

    assert await store.get("favoriteShows") == [2]
    assert await store.remove("favoriteShows") is True
    assert await store.remove("favoriteShows") is False
    assert await store.get("favoriteShows") is None


@pytest.mark.anyio("asyncio")
async def test_remove_prefixes_treats_wildcards_literally(store: DurableStore) -> None:
    await store.set("currentTime-a", 1.0)
    await store.set("currentTime-b", 2.0)
    await store.set("currentTimeXa", 3.0)
    await store.set("progress_x", 4.0)
    await store.set("progressAx", 5.0)

    removed = await store.remove_prefixes("currentTime-", "progress_")

    assert removed == 3
    assert await store.keys() == ["currentTimeXa", "progressAx"]


@pytest.mark.anyio("asyncio")
async def test_values_survive_a_new_engine(tmp_path) -> None:
    url = f"sqlite+aiosqlite:///{tmp_path / 'restart.db'}"

    first = Database(url)
    await first.create_all()
    await DurableStore(first.session_factory).set("favoriteShowsTime", {"2": "09:05"})
    await first.dispose()

    second = Database(url)
    await second.create_all()
    try:
        value = await DurableStore(second.session_factory).get("favoriteShowsTime")
    finally:
        await second.dispose()

    assert value == {"2": "09:05"}
