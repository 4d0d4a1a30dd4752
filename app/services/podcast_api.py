"""Client for the remote podcast catalog service."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..models import Show, ShowDetail

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when the catalog service fails or returns a non-2xx status."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DetailFetchError(FetchError):
    """Raised when a single show's season detail cannot be fetched."""


class PodcastApiClient:
    """Thin wrapper around the ``/shows`` and ``/id/{id}`` endpoints."""

    def __init__(self, http_client: httpx.AsyncClient):
        self._client = http_client

    async def fetch_shows(self) -> list[Show]:
        """Return every show preview published by the service."""

        try:
            response = await self._client.get("/shows")
        except httpx.HTTPError as exc:
            raise FetchError(f"Unable to reach the catalog service: {exc}") from exc
        if response.status_code >= 400:
            raise FetchError(
                f"Error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        data = self._json(response)
        if not isinstance(data, list):
            raise FetchError("Unexpected show list payload from the catalog service")

        shows: list[Show] = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                shows.append(Show.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping malformed show %s: %s", entry.get("id"), exc)
        return shows

    async def fetch_show_detail(self, show_id: int) -> ShowDetail:
        """Return the flattened seasons and episodes for ``show_id``."""

        try:
            response = await self._client.get(f"/id/{show_id}")
        except httpx.HTTPError as exc:
            raise DetailFetchError(
                f"Unable to fetch show {show_id}: {exc}"
            ) from exc
        if response.status_code >= 400:
            raise DetailFetchError(
                f"Error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        data = self._json(response, error=DetailFetchError)
        if not isinstance(data, dict):
            raise DetailFetchError(f"Unexpected detail payload for show {show_id}")
        try:
            return ShowDetail.from_api_payload(show_id, data)
        except (ValueError, ValidationError) as exc:
            raise DetailFetchError(
                f"Malformed detail payload for show {show_id}: {exc}"
            ) from exc

    @staticmethod
    def _json(
        response: httpx.Response, *, error: type[FetchError] = FetchError
    ) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise error(
                "Catalog service returned a non-JSON response",
                status_code=response.status_code,
            ) from exc
