"""Tests for playback progress persistence."""

from __future__ import annotations

import pytest

from app.services.playback import (
    PROGRESS_PREFIXES,
    PlaybackProgressTracker,
    progress_percentage,
)
from app.services.store import DurableStore


def test_progress_percentage_handles_unknown_duration() -> None:
    assert progress_percentage(30.0, 120.0) == 25.0
    assert progress_percentage(30.0, 0.0) == 0.0
    assert progress_percentage(30.0, float("nan")) == 0.0
    assert progress_percentage(500.0, 120.0) == 100.0


@pytest.mark.anyio("asyncio")
async def test_save_then_restore_seeks_to_saved_time(store: DurableStore) -> None:
    tracker = PlaybackProgressTracker(store)

    record = await tracker.save("audio-player-1-1-2", 45.5, 182.0)

    assert record.progress_percentage == pytest.approx(25.0)
    assert await store.get("currentTime-audio-player-1-1-2") == 45.5
    assert await tracker.restore("audio-player-1-1-2") == 45.5


@pytest.mark.anyio("asyncio")
async def test_missing_record_leaves_position_at_zero(store: DurableStore) -> None:
    tracker = PlaybackProgressTracker(store)
    await store.set("currentTime-audio-player-9-1-1", 12.0)

    assert await tracker.restore("audio-player-1-1-1") is None
    # Half a record is treated as no record.
    assert await tracker.restore("audio-player-9-1-1") is None


@pytest.mark.anyio("asyncio")
async def test_negative_position_rejected(store: DurableStore) -> None:
    with pytest.raises(ValueError):
        await PlaybackProgressTracker(store).save("audio-player-1-1-1", -1.0, 10.0)


@pytest.mark.anyio("asyncio")
async def test_reset_all_removes_only_progress_keys(store: DurableStore) -> None:
    tracker = PlaybackProgressTracker(store)
    await tracker.save("audio-player-1-1-1", 10.0, 100.0)
    await tracker.save("audio-player-1-1-2", 20.0, 100.0)
    await tracker.mark_fully_listened("audio-player-1-1-1")
    await store.set("favoriteShows", [1])

    assert await tracker.is_fully_listened("audio-player-1-1-1") is True
    removed = await tracker.reset_all()

    assert removed == 5
    for prefix in PROGRESS_PREFIXES:
        assert await store.keys(prefix) == []
    assert await store.get("favoriteShows") == [1]
    assert await tracker.is_fully_listened("audio-player-1-1-1") is False
