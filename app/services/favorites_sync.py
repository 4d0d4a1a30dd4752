"""Best-effort mirror of favorite titles to a remote table service."""

from __future__ import annotations

import json
import logging
from typing import Sequence
from urllib.parse import quote

import httpx

from ..config import Settings

logger = logging.getLogger(__name__)


class SyncError(RuntimeError):
    """Raised when the remote favorites upsert is rejected or unreachable."""


class FavoritesSyncClient:
    """Upserts the favorite title list through a PostgREST-style endpoint."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    @property
    def enabled(self) -> bool:
        return self._settings.sync_enabled

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Prefer": "resolution=merge-duplicates,return=minimal",
        }
        api_key = self._settings.sync_api_key
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    async def upsert_titles(self, titles: Sequence[str]) -> None:
        """Replace the remote favorites record with ``titles``.

        The row is identified by ``sync_owner_id`` in the ``sync_record_key``
        column, so every upsert from this installation targets the same row.
        """

        if not self.enabled:
            logger.debug("Favorites sync disabled, skipping upsert of %s titles", len(titles))
            return

        record_key = self._settings.sync_record_key
        path = f"/rest/v1/{quote(self._settings.sync_table, safe='')}"
        payload = {
            record_key: self._settings.sync_owner_id,
            self._settings.sync_titles_column: json.dumps(list(titles)),
        }
        try:
            response = await self._client.post(
                path,
                json=payload,
                params={"on_conflict": record_key},
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise SyncError(f"Favorites sync request failed: {exc}") from exc

        if response.status_code >= 400:
            raise SyncError(
                f"Favorites sync rejected with {response.status_code}: {response.text}"
            )
