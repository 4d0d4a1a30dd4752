"""Static genre code table used by the podcast catalog."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


UNKNOWN_GENRE = "Unknown Genre"


@dataclass(frozen=True)
class Genre:
    """A genre code as published by the podcast API."""

    code: int
    name: str


GENRES: tuple[Genre, ...] = (
    Genre(code=1, name="Personal Growth"),
    Genre(code=2, name="Investigative Journalism"),
    Genre(code=3, name="History"),
    Genre(code=4, name="Comedy"),
    Genre(code=5, name="Entertainment"),
    Genre(code=6, name="Business"),
    Genre(code=7, name="Fiction"),
    Genre(code=8, name="News"),
    Genre(code=9, name="Kids and Family"),
)

GENRE_NAMES: dict[int, str] = {genre.code: genre.name for genre in GENRES}


def genre_name(code: int) -> str:
    """Return the display name for ``code``."""

    return GENRE_NAMES.get(code, UNKNOWN_GENRE)


def genre_names(codes: Iterable[int]) -> str:
    """Return the display names for ``codes`` joined by commas."""

    return ", ".join(genre_name(code) for code in codes)
