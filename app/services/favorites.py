"""Favorite shows with their timestamps, persisted locally and mirrored remotely."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

import httpx

from ..models import Show, SortKey
from ..utils import format_clock
from .catalog_store import CatalogStore
from .favorites_sync import FavoritesSyncClient, SyncError
from .filtering import sort_shows
from .store import DurableStore

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favoriteShows"
FAVORITE_TIMES_KEY = "favoriteShowsTime"


class FavoritesManager:
    """Owns the favorite id list and the time each show was favorited.

    Local state is authoritative. The remote mirror is updated in the
    background after every change and its failures are only logged.
    """

    def __init__(
        self,
        store: DurableStore,
        catalog: CatalogStore,
        sync_client: FavoritesSyncClient,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._catalog = catalog
        self._sync = sync_client
        self._clock = clock
        self._ids: list[int] = []
        self._timestamps: dict[int, str] = {}
        self._pending_syncs: set[asyncio.Task[None]] = set()

    @property
    def ids(self) -> tuple[int, ...]:
        return tuple(self._ids)

    @property
    def timestamps(self) -> dict[int, str]:
        return dict(self._timestamps)

    def is_favorite(self, show_id: int) -> bool:
        return show_id in self._ids

    def timestamp_for(self, show_id: int) -> str | None:
        return self._timestamps.get(show_id)

    async def load(self) -> None:
        """Restore favorites from the durable store."""

        raw_ids = await self._store.get(FAVORITES_KEY) or []
        raw_times = await self._store.get(FAVORITE_TIMES_KEY) or {}

        ids: list[int] = []
        for value in raw_ids if isinstance(raw_ids, list) else []:
            try:
                show_id = int(value)
            except (TypeError, ValueError):
                logger.warning("Ignoring stored favorite id %r", value)
                continue
            if show_id not in ids:
                ids.append(show_id)

        timestamps: dict[int, str] = {}
        if isinstance(raw_times, dict):
            for key, value in raw_times.items():
                try:
                    show_id = int(key)
                except (TypeError, ValueError):
                    continue
                if show_id in ids:
                    timestamps[show_id] = str(value)

        self._ids = ids
        self._timestamps = timestamps
        logger.info("Loaded %s favorite shows", len(ids))

    async def toggle(self, show_id: int) -> bool:
        """Add or remove ``show_id``; return whether it is now a favorite."""

        if show_id in self._ids:
            self._ids.remove(show_id)
            self._timestamps.pop(show_id, None)
            now_favorite = False
        else:
            self._ids.append(show_id)
            self._timestamps[show_id] = format_clock(self._clock())
            now_favorite = True

        await self._persist()
        self._schedule_sync()
        return now_favorite

    async def clear(self) -> None:
        """Drop every favorite and mirror the empty list."""

        self._ids.clear()
        self._timestamps.clear()
        await self._persist()
        self._schedule_sync()

    def titles(self) -> list[str]:
        """Return favorite titles in insertion order; unknown ids map to ``""``."""

        titles: list[str] = []
        for show_id in self._ids:
            show = self._catalog.get(show_id)
            titles.append(show.title if show else "")
        return titles

    def sorted(self, sort_key: SortKey | str | None = SortKey.TITLE_ASC) -> list[Show]:
        """Return favorite shows ordered by ``sort_key`` (title A-Z by default)."""

        key = SortKey.parse(sort_key)
        if key is SortKey.NONE:
            key = SortKey.TITLE_ASC

        resolved: list[Show] = []
        for show_id in self._ids:
            show = self._catalog.get(show_id)
            if show is None:
                logger.debug("Favorite %s is not in the catalog; skipping", show_id)
                continue
            resolved.append(show)
        return sort_shows(resolved, key)

    async def wait_for_sync(self) -> None:
        """Wait for background mirror updates that are still in flight."""

        if self._pending_syncs:
            await asyncio.gather(*list(self._pending_syncs), return_exceptions=True)

    async def _persist(self) -> None:
        await self._store.set(FAVORITES_KEY, list(self._ids))
        await self._store.set(
            FAVORITE_TIMES_KEY,
            {str(show_id): value for show_id, value in self._timestamps.items()},
        )

    def _schedule_sync(self) -> None:
        titles = self.titles()

        async def _runner() -> None:
            try:
                await self._sync.upsert_titles(titles)
            except (SyncError, httpx.HTTPError) as exc:
                logger.error("Failed to mirror favorites: %s", exc)
            except Exception as exc:  # pragma: no cover - background safety net
                logger.exception("Unexpected favorites sync failure: %s", exc)

        task = asyncio.create_task(_runner())
        self._pending_syncs.add(task)
        task.add_done_callback(self._pending_syncs.discard)
