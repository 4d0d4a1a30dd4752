"""Session-level orchestration of the catalog, favorites and playback state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from ..config import Settings
from ..models import PlaybackRecord, Show, ShowDetail, SortKey
from . import filtering, share
from .catalog_store import CatalogStore
from .favorites import FavoritesManager
from .favorites_sync import FavoritesSyncClient
from .playback import PlaybackProgressTracker
from .podcast_api import DetailFetchError, FetchError, PodcastApiClient
from .search import SearchIndex
from .store import DurableStore

logger = logging.getLogger(__name__)


class StaleDetailError(RuntimeError):
    """Raised when a detail response arrives after the user moved on."""


@dataclass
class DetailContext:
    """Tracks which show's episode dialog is current."""

    generation: int = 0
    show_id: int | None = None
    detail: ShowDetail | None = field(default=None, repr=False)


class ListeningSession:
    """Explicit container for one user's session state.

    Every user action maps to one method here; components never touch each
    other's state except through these calls.
    """

    def __init__(
        self,
        settings: Settings,
        store: DurableStore,
        api: PodcastApiClient,
        sync_client: FavoritesSyncClient,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._settings = settings
        self.catalog = CatalogStore(store, api)
        self.search_index = SearchIndex(settings.search_threshold)
        self.favorites = FavoritesManager(store, self.catalog, sync_client, clock=clock)
        self.playback = PlaybackProgressTracker(store)
        self._detail = DetailContext()

    async def start(self) -> None:
        """Hydrate cached state, then try to refresh the catalog remotely."""

        await self.catalog.hydrate()
        await self.favorites.load()
        try:
            await self.catalog.refresh()
        except FetchError:
            logger.info("Continuing with %s cached shows", len(self.catalog.shows))

    async def stop(self) -> None:
        await self.favorites.wait_for_sync()

    def list_shows(
        self,
        query: str = "",
        genre_code: int | str | None = None,
        sort_key: SortKey | str | None = SortKey.NONE,
    ) -> list[Show]:
        shows = self.catalog.shows
        filtered = filtering.apply(shows, query, genre_code, sort_key)
        return filtering.visible_shows(filtered, shows)

    def search(self, query: str) -> list[Show]:
        return self.search_index.search(query, self.catalog.shows)

    async def refresh_catalog(self) -> tuple[Show, ...]:
        return await self.catalog.refresh()

    async def toggle_description(self, show_id: int) -> Show:
        return await self.catalog.toggle_description(show_id)

    async def open_show(self, show_id: int) -> ShowDetail:
        """Fetch episodes for ``show_id`` and make it the current dialog.

        A response that resolves after another show was opened, or after the
        dialog was closed, is discarded with ``StaleDetailError``. A failed
        fetch for the current request leaves no dialog open.
        """

        self._detail.generation += 1
        generation = self._detail.generation
        self._detail.show_id = show_id

        try:
            detail = await self.catalog.fetch_detail(show_id)
        except DetailFetchError as exc:
            if generation != self._detail.generation:
                raise StaleDetailError(
                    f"Detail request for show {show_id} was superseded"
                ) from exc
            self._detail.show_id = None
            self._detail.detail = None
            raise
        if generation != self._detail.generation:
            logger.debug(
                "Discarding detail for show %s (request %s superseded by %s)",
                show_id,
                generation,
                self._detail.generation,
            )
            raise StaleDetailError(f"Detail request for show {show_id} was superseded")
        self._detail.detail = detail
        return detail

    def close_show(self) -> None:
        self._detail.generation += 1
        self._detail.show_id = None
        self._detail.detail = None

    @property
    def current_detail(self) -> ShowDetail | None:
        return self._detail.detail

    async def toggle_favorite(self, show_id: int) -> bool:
        return await self.favorites.toggle(show_id)

    async def clear_favorites(self) -> None:
        await self.favorites.clear()

    def favorite_shows(
        self, sort_key: SortKey | str | None = SortKey.TITLE_ASC
    ) -> list[Show]:
        return self.favorites.sorted(sort_key)

    def share_link(self, base_url: str | None = None) -> str:
        return share.encode(
            self.favorites.ids,
            self.catalog.shows,
            base_url or self._settings.public_base_url,
        )

    async def save_progress(
        self, player_key: str, current_time: float, duration: float
    ) -> PlaybackRecord:
        return await self.playback.save(player_key, current_time, duration)

    async def restore_progress(self, player_key: str) -> PlaybackRecord | None:
        return await self.playback.record(player_key)

    async def mark_listened(self, player_key: str) -> None:
        await self.playback.mark_fully_listened(player_key)

    async def reset_progress(self) -> int:
        return await self.playback.reset_all()
