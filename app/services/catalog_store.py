"""In-memory show catalog hydrated from the durable cache."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from ..models import Show, ShowDetail
from .podcast_api import FetchError, PodcastApiClient
from .store import DurableStore

logger = logging.getLogger(__name__)

SHOWS_KEY = "shows"


class CatalogStore:
    """Holds the session's show list and its per-show description flags."""

    def __init__(self, store: DurableStore, api: PodcastApiClient):
        self._store = store
        self._api = api
        self._shows: list[Show] = []
        self._in_flight = 0

    @property
    def loading(self) -> bool:
        """True while any remote request is still pending."""

        return self._in_flight > 0

    @property
    def shows(self) -> tuple[Show, ...]:
        return tuple(self._shows)

    def get(self, show_id: int) -> Show | None:
        for show in self._shows:
            if show.id == show_id:
                return show
        return None

    async def hydrate(self) -> tuple[Show, ...]:
        """Load the previously cached show list, if any."""

        cached = await self._store.get(SHOWS_KEY)
        shows: list[Show] = []
        if isinstance(cached, list):
            for entry in cached:
                try:
                    shows.append(Show.model_validate(entry))
                except ValidationError as exc:
                    logger.warning("Dropping unreadable cached show: %s", exc)
        elif cached is not None:
            logger.warning("Ignoring cached show list of type %s", type(cached).__name__)
        self._shows = shows
        logger.info("Hydrated %s shows from the local cache", len(shows))
        return self.shows

    async def refresh(self) -> tuple[Show, ...]:
        """Replace the catalog with the remote show list.

        On failure the current collection is kept and ``FetchError`` is
        re-raised after logging.
        """

        self._in_flight += 1
        try:
            shows = await self._api.fetch_shows()
        except FetchError as exc:
            logger.warning("Failed to refresh the show catalog: %s", exc)
            raise
        finally:
            self._in_flight -= 1

        self._shows = shows
        await self._persist()
        logger.info("Refreshed catalog with %s shows", len(shows))
        return self.shows

    async def toggle_description(self, show_id: int) -> Show:
        """Flip the full-description flag for ``show_id`` and persist it."""

        for index, show in enumerate(self._shows):
            if show.id == show_id:
                updated = show.model_copy(
                    update={"show_full_description": not show.show_full_description}
                )
                self._shows[index] = updated
                await self._persist()
                return updated
        raise KeyError(f"Show {show_id} not found")

    async def fetch_detail(self, show_id: int) -> ShowDetail:
        """Fetch the flattened season and episode list for ``show_id``."""

        self._in_flight += 1
        try:
            return await self._api.fetch_show_detail(show_id)
        except FetchError as exc:
            logger.warning(
                "Failed to fetch detail for show %s (status %s): %s",
                show_id,
                exc.status_code,
                exc,
            )
            raise
        finally:
            self._in_flight -= 1

    async def _persist(self) -> None:
        await self._store.set(SHOWS_KEY, [show.to_cache_entry() for show in self._shows])
