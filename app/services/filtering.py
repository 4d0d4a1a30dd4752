"""Filtering and ordering of catalog listings."""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from ..models import Show, SortKey
from ..utils import collation_key


def _by_title(shows: Iterable[Show]) -> list[Show]:
    return sorted(shows, key=lambda show: collation_key(show.title))


def _by_updated(shows: Iterable[Show]) -> list[Show]:
    return sorted(shows, key=lambda show: show.updated)


def _keep_order(shows: Iterable[Show]) -> list[Show]:
    return list(shows)


# Descending orders are exact reversals of the ascending ones, ties included.
SORTERS: dict[SortKey, Callable[[Iterable[Show]], list[Show]]] = {
    SortKey.TITLE_ASC: _by_title,
    SortKey.TITLE_DESC: lambda shows: _by_title(shows)[::-1],
    SortKey.DATE_ASC: _by_updated,
    SortKey.DATE_DESC: lambda shows: _by_updated(shows)[::-1],
    SortKey.NONE: _keep_order,
}


def sort_shows(shows: Iterable[Show], sort_key: SortKey | str | None) -> list[Show]:
    """Return a new list of ``shows`` ordered by ``sort_key``."""

    return SORTERS[SortKey.parse(sort_key)](shows)


def title_matches(show: Show, query: str) -> bool:
    """Substring match, loosened to a shared first letter."""

    title = show.title.lower()
    needle = (query or "").lower()
    return needle in title or title[:1] == needle[:1]


def genre_matches(show: Show, genre_code: int | str | None) -> bool:
    if genre_code is None or genre_code == "":
        return True
    return show.has_genre(int(genre_code))


def apply(
    shows: Sequence[Show],
    query: str = "",
    genre_code: int | str | None = None,
    sort_key: SortKey | str | None = SortKey.NONE,
) -> list[Show]:
    """Filter ``shows`` by title and genre, then order the survivors.

    The input sequence is never modified.
    """

    filtered = [
        show
        for show in shows
        if title_matches(show, query) and genre_matches(show, genre_code)
    ]
    return sort_shows(filtered, sort_key)


def visible_shows(filtered: Sequence[Show], catalog: Sequence[Show]) -> list[Show]:
    """Return ``filtered`` when it has entries, otherwise the full catalog."""

    return list(filtered) if filtered else list(catalog)
