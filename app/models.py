"""Pydantic models describing catalog payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .genres import genre_names
from .utils import parse_timestamp


class SortKey(str, Enum):
    """Orderings offered for the catalog and the favorites list."""

    TITLE_ASC = "titleAsc"
    TITLE_DESC = "titleDesc"
    DATE_ASC = "dateAsc"
    DATE_DESC = "dateDesc"
    NONE = "none"

    @classmethod
    def parse(cls, raw: str | SortKey | None) -> SortKey:
        """Return the matching key, or ``NONE`` for blank and unknown values."""

        if isinstance(raw, SortKey):
            return raw
        try:
            return cls((raw or "").strip())
        except ValueError:
            return cls.NONE


class Show(BaseModel):
    """A podcast show as listed by the remote catalog."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    description: str = ""
    image: str = ""
    genres: list[int] = Field(default_factory=list)
    seasons: int = 0
    updated: datetime
    show_full_description: bool = Field(
        default=False,
        validation_alias=AliasChoices("showFullDescription", "show_full_description"),
        serialization_alias="showFullDescription",
    )

    @field_validator("updated", mode="before")
    @classmethod
    def _parse_updated(cls, value: object) -> datetime:
        return parse_timestamp(value)

    @field_validator("genres", mode="before")
    @classmethod
    def _dedupe_genres(cls, value: object) -> list[int]:
        """Genres behave as a set; keep first-seen order for display."""

        if value is None:
            return []
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise TypeError("genres must be a list of integer codes")
        seen: list[int] = []
        for code in value:
            number = int(code)
            if number not in seen:
                seen.append(number)
        return seen

    def has_genre(self, code: int) -> bool:
        return code in self.genres

    def genre_label(self) -> str:
        """Return the human-readable genre list for display cards."""

        return genre_names(self.genres)

    def to_cache_entry(self) -> dict[str, object]:
        """Return the JSON form persisted in the durable show cache."""

        return self.model_dump(mode="json", by_alias=True)


class Episode(BaseModel):
    """A single playable episode flattened out of a show's seasons."""

    show_id: int
    season: int
    episode: int
    title: str = ""
    description: str = ""
    file: str = ""

    @property
    def player_key(self) -> str:
        """Return the stable key used to persist playback progress."""

        return f"audio-player-{self.show_id}-{self.season}-{self.episode}"


class ShowDetail(BaseModel):
    """Season labels and the flat episode list for one show."""

    show_id: int
    seasons: list[str] = Field(default_factory=list)
    episodes: list[Episode] = Field(default_factory=list)

    @classmethod
    def from_api_payload(cls, show_id: int, data: dict[str, object]) -> "ShowDetail":
        """Flatten the nested season structure returned by ``/id/{id}``.

        Season numbers come from each season's position in the payload, not
        from any ``season`` field the source records carry.
        """

        raw_seasons = data.get("seasons") or []
        if not isinstance(raw_seasons, list):
            raise ValueError("Show detail payload has no season list")

        labels: list[str] = []
        episodes: list[Episode] = []
        for index, season in enumerate(raw_seasons):
            season_number = index + 1
            labels.append(f"Season {season_number}")
            if not isinstance(season, dict):
                continue
            for entry in season.get("episodes") or []:
                if not isinstance(entry, dict):
                    continue
                episode_data = {**entry, "season": season_number, "show_id": show_id}
                episodes.append(Episode.model_validate(episode_data))

        return cls(show_id=show_id, seasons=labels, episodes=episodes)


class PlaybackRecord(BaseModel):
    """Saved listening position for one episode player."""

    current_time: float
    progress_percentage: float = Field(ge=0, le=100)
