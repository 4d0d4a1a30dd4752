"""Per-episode playback position persistence."""

from __future__ import annotations

import logging
import math

from ..models import PlaybackRecord
from .store import DurableStore

logger = logging.getLogger(__name__)

CURRENT_TIME_PREFIX = "currentTime-"
PROGRESS_PREFIX = "progressPercentage-"
FULLY_LISTENED_PREFIX = "fullyListened-"
PROGRESS_PREFIXES = (CURRENT_TIME_PREFIX, PROGRESS_PREFIX, FULLY_LISTENED_PREFIX)


def progress_percentage(current_time: float, duration: float) -> float:
    """Return how far into the episode ``current_time`` is, in percent."""

    if not math.isfinite(duration) or duration <= 0:
        return 0.0
    return min(max(current_time / duration * 100, 0.0), 100.0)


class PlaybackProgressTracker:
    """Saves listening positions on pause/unload and restores them on mount."""

    def __init__(self, store: DurableStore):
        self._store = store

    async def save(
        self, player_key: str, current_time: float, duration: float
    ) -> PlaybackRecord:
        if not math.isfinite(current_time) or current_time < 0:
            raise ValueError("current_time must be a non-negative number")
        record = PlaybackRecord(
            current_time=current_time,
            progress_percentage=progress_percentage(current_time, duration),
        )
        await self._store.set(f"{CURRENT_TIME_PREFIX}{player_key}", record.current_time)
        await self._store.set(
            f"{PROGRESS_PREFIX}{player_key}", record.progress_percentage
        )
        return record

    async def record(self, player_key: str) -> PlaybackRecord | None:
        """Return the saved record, or ``None`` when either half is missing."""

        current_time = await self._store.get(f"{CURRENT_TIME_PREFIX}{player_key}")
        progress = await self._store.get(f"{PROGRESS_PREFIX}{player_key}")
        if current_time is None or progress is None:
            return None
        try:
            return PlaybackRecord(
                current_time=float(current_time),
                progress_percentage=float(progress),
            )
        except (TypeError, ValueError) as exc:
            logger.warning("Discarding unreadable progress for %s: %s", player_key, exc)
            return None

    async def restore(self, player_key: str) -> float | None:
        """Return the position to seek to, or ``None`` to start from zero."""

        record = await self.record(player_key)
        return record.current_time if record else None

    async def mark_fully_listened(self, player_key: str) -> None:
        await self._store.set(f"{FULLY_LISTENED_PREFIX}{player_key}", True)

    async def is_fully_listened(self, player_key: str) -> bool:
        return bool(await self._store.get(f"{FULLY_LISTENED_PREFIX}{player_key}"))

    async def reset_all(self) -> int:
        """Remove every stored position, progress and completion marker."""

        removed = await self._store.remove_prefixes(*PROGRESS_PREFIXES)
        logger.info("Reset listening progress (%s keys removed)", removed)
        return removed
