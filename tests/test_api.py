from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.main import register_routes
from app.models import PlaybackRecord, Show, ShowDetail, SortKey
from app.services import filtering, share
from app.services.podcast_api import DetailFetchError
from app.services.session import ListeningSession, StaleDetailError
from factories import sample_catalog


class DummyFavorites:
    def __init__(self) -> None:
        self.ids: list[int] = []

    def is_favorite(self, show_id: int) -> bool:
        return show_id in self.ids

    def timestamp_for(self, show_id: int) -> str | None:
        return "12:00" if show_id in self.ids else None


class DummyPlayback:
    async def is_fully_listened(self, player_key: str) -> bool:
        return player_key == "done"


class DummySession(ListeningSession):
    """In-memory ListeningSession stub for route testing."""

    def __init__(self) -> None:  # pragma: no cover - nothing to initialise
        # Deliberately skip super().__init__ to avoid touching external systems.
        self.shows = sample_catalog()
        self.favorites = DummyFavorites()  # type: ignore[assignment]
        self.playback = DummyPlayback()  # type: ignore[assignment]
        self.saved: dict[str, PlaybackRecord] = {}
        self.detail_error: Exception | None = None

    def list_shows(self, query="", genre_code=None, sort_key=SortKey.NONE) -> list[Show]:
        filtered = filtering.apply(self.shows, query, genre_code, sort_key)
        return filtering.visible_shows(filtered, self.shows)

    async def toggle_favorite(self, show_id: int) -> bool:  # type: ignore[override]
        if show_id in self.favorites.ids:
            self.favorites.ids.remove(show_id)
            return False
        self.favorites.ids.append(show_id)
        return True

    async def toggle_description(self, show_id: int) -> Show:  # type: ignore[override]
        raise KeyError(show_id)

    async def open_show(self, show_id: int) -> ShowDetail:  # type: ignore[override]
        if self.detail_error is not None:
            raise self.detail_error
        return ShowDetail.from_api_payload(
            show_id, {"seasons": [{"episodes": [{"episode": 3, "title": "Ep"}]}]}
        )

    def share_link(self, base_url: str | None = None) -> str:
        return share.encode(self.favorites.ids, self.shows, base_url or "https://x/")

    async def save_progress(  # type: ignore[override]
        self, player_key: str, current_time: float, duration: float
    ) -> PlaybackRecord:
        record = PlaybackRecord(
            current_time=current_time,
            progress_percentage=current_time / duration * 100,
        )
        self.saved[player_key] = record
        return record

    async def restore_progress(self, player_key: str) -> PlaybackRecord | None:  # type: ignore[override]
        return self.saved.get(player_key)


def _client(session: DummySession) -> TestClient:
    app = FastAPI()
    register_routes(app)
    app.state.session = session
    return TestClient(app)


def test_list_shows_filters_and_annotates_favorites() -> None:
    session = DummySession()
    session.favorites.ids.append(1)

    with _client(session) as client:
        response = client.get("/api/shows", params={"query": "al", "sort": "titleAsc"})

    assert response.status_code == 200
    payload = response.json()
    assert [entry["title"] for entry in payload] == ["Alpha"]
    assert payload[0]["favorite"] is True
    assert payload[0]["favoritedAt"] == "12:00"
    assert payload[0]["genreNames"] == "Personal Growth"


def test_invalid_genre_is_rejected() -> None:
    with _client(DummySession()) as client:
        response = client.get("/api/shows", params={"genre": "comedy"})

    assert response.status_code == 400


def test_toggle_then_share() -> None:
    with _client(DummySession()) as client:
        toggled = client.post("/api/favorites/2/toggle")
        shared = client.get("/api/share", params={"base_url": "https://x/?old=1"})

    assert toggled.json() == {"id": 2, "favorite": True, "favoritedAt": "12:00"}
    assert shared.json() == {"url": "https://x/?favorites=Beta"}


def test_unknown_show_description_returns_404() -> None:
    with _client(DummySession()) as client:
        response = client.post("/api/shows/77/description")

    assert response.status_code == 404


def test_episodes_include_player_keys() -> None:
    with _client(DummySession()) as client:
        response = client.get("/api/shows/5/episodes")

    assert response.status_code == 200
    assert response.json()["episodes"][0]["player_key"] == "audio-player-5-1-3"


def test_episode_errors_map_to_status_codes() -> None:
    session = DummySession()
    with _client(session) as client:
        session.detail_error = DetailFetchError("Error: 500", status_code=500)
        failed = client.get("/api/shows/5/episodes")
        session.detail_error = StaleDetailError("superseded")
        stale = client.get("/api/shows/5/episodes")

    assert failed.status_code == 502
    assert stale.status_code == 409


def test_progress_round_trip() -> None:
    with _client(DummySession()) as client:
        saved = client.put(
            "/api/progress/audio-player-5-1-3",
            json={"current_time": 30, "duration": 120},
        )
        restored = client.get("/api/progress/audio-player-5-1-3")
        missing = client.get("/api/progress/done")
        invalid = client.put(
            "/api/progress/audio-player-5-1-3",
            json={"current_time": -5, "duration": 120},
        )

    assert saved.status_code == 200
    assert saved.json()["progress_percentage"] == 25.0
    assert restored.json()["record"] == {"current_time": 30.0, "progress_percentage": 25.0}
    assert missing.json() == {"player_key": "done", "record": None, "fully_listened": True}
    assert invalid.status_code == 422
