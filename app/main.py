"""Entry point for the FastAPI-powered listening session API."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import settings
from .database import Database
from .genres import GENRES
from .models import PlaybackRecord, Show, ShowDetail
from .services.favorites_sync import FavoritesSyncClient
from .services.podcast_api import DetailFetchError, FetchError, PodcastApiClient
from .services.session import ListeningSession, StaleDetailError
from .services.store import DurableStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


class ProgressUpdate(BaseModel):
    """Body sent by the player on pause or page unload."""

    current_time: float = Field(ge=0)
    duration: float


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    podcast_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.podcast_api_url),
            timeout=httpx.Timeout(20.0, connect=10.0),
        )
    )
    sync_client_kwargs: dict[str, Any] = {
        "timeout": httpx.Timeout(10.0, connect=5.0)
    }
    if settings.sync_api_url:
        sync_client_kwargs["base_url"] = str(settings.sync_api_url)
    sync_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(**sync_client_kwargs)
    )
    database = Database(settings.database_url)
    await database.create_all()

    session = ListeningSession(
        settings,
        DurableStore(database.session_factory),
        PodcastApiClient(podcast_http_client),
        FavoritesSyncClient(settings, sync_http_client),
    )
    fastapi_app.state.session = session
    fastapi_app.state.database = database
    await session.start()

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await session.stop()
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Browse podcast shows, keep favorites and resume episodes",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_session(app: FastAPI) -> ListeningSession:
    session = getattr(app.state, "session", None)
    if not isinstance(session, ListeningSession):
        raise RuntimeError("Listening session not initialised")
    return session


def _show_payload(show: Show, session: ListeningSession) -> dict[str, Any]:
    payload = show.model_dump(mode="json", by_alias=True)
    payload["genreNames"] = show.genre_label()
    payload["favorite"] = session.favorites.is_favorite(show.id)
    payload["favoritedAt"] = session.favorites.timestamp_for(show.id)
    return payload


def _detail_payload(detail: ShowDetail) -> dict[str, Any]:
    payload = detail.model_dump(mode="json")
    for entry, episode in zip(payload["episodes"], detail.episodes):
        entry["player_key"] = episode.player_key
    return payload


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/genres")
    async def list_genres() -> list[dict[str, Any]]:
        return [{"code": genre.code, "name": genre.name} for genre in GENRES]

    @fastapi_app.get("/api/shows")
    async def list_shows(
        query: str = "", genre: str = "", sort: str = ""
    ) -> list[dict[str, Any]]:
        session = get_session(fastapi_app)
        try:
            shows = session.list_shows(query, genre, sort)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return [_show_payload(show, session) for show in shows]

    @fastapi_app.get("/api/search")
    async def search_shows(q: str = "") -> list[dict[str, Any]]:
        session = get_session(fastapi_app)
        return [_show_payload(show, session) for show in session.search(q)]

    @fastapi_app.post("/api/shows/refresh")
    async def refresh_shows() -> dict[str, int]:
        session = get_session(fastapi_app)
        try:
            shows = await session.refresh_catalog()
        except FetchError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return {"count": len(shows)}

    @fastapi_app.post("/api/shows/{show_id}/description")
    async def toggle_description(show_id: int) -> dict[str, Any]:
        session = get_session(fastapi_app)
        try:
            show = await session.toggle_description(show_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=f"Show {show_id} not found") from exc
        return _show_payload(show, session)

    @fastapi_app.get("/api/shows/{show_id}/episodes")
    async def show_episodes(show_id: int) -> dict[str, Any]:
        session = get_session(fastapi_app)
        try:
            detail = await session.open_show(show_id)
        except StaleDetailError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except DetailFetchError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return _detail_payload(detail)

    @fastapi_app.delete("/api/shows/current")
    async def close_show() -> dict[str, str]:
        get_session(fastapi_app).close_show()
        return {"status": "closed"}

    @fastapi_app.get("/api/favorites")
    async def list_favorites(sort: str = "") -> list[dict[str, Any]]:
        session = get_session(fastapi_app)
        return [_show_payload(show, session) for show in session.favorite_shows(sort)]

    @fastapi_app.post("/api/favorites/{show_id}/toggle")
    async def toggle_favorite(show_id: int) -> dict[str, Any]:
        session = get_session(fastapi_app)
        favorite = await session.toggle_favorite(show_id)
        return {
            "id": show_id,
            "favorite": favorite,
            "favoritedAt": session.favorites.timestamp_for(show_id),
        }

    @fastapi_app.delete("/api/favorites")
    async def clear_favorites() -> dict[str, str]:
        await get_session(fastapi_app).clear_favorites()
        return {"status": "cleared"}

    @fastapi_app.get("/api/share")
    async def share_link(base_url: str | None = None) -> dict[str, str]:
        session = get_session(fastapi_app)
        return {"url": session.share_link(base_url)}

    @fastapi_app.get("/api/progress/{player_key}")
    async def get_progress(player_key: str) -> dict[str, Any]:
        session = get_session(fastapi_app)
        record = await session.restore_progress(player_key)
        return {
            "player_key": player_key,
            "record": record.model_dump() if record else None,
            "fully_listened": await session.playback.is_fully_listened(player_key),
        }

    @fastapi_app.put("/api/progress/{player_key}")
    async def save_progress(player_key: str, update: ProgressUpdate) -> PlaybackRecord:
        session = get_session(fastapi_app)
        return await session.save_progress(
            player_key, update.current_time, update.duration
        )

    @fastapi_app.post("/api/progress/{player_key}/listened")
    async def mark_listened(player_key: str) -> dict[str, Any]:
        await get_session(fastapi_app).mark_listened(player_key)
        return {"player_key": player_key, "fully_listened": True}

    @fastapi_app.delete("/api/progress")
    async def reset_progress() -> dict[str, int]:
        removed = await get_session(fastapi_app).reset_progress()
        return {"removed": removed}


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
