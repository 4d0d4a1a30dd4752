"""Shareable links encoding the current favorites.

The favorites parameter is the comma-joined list of titles with no escaping.
A title that itself contains a comma cannot be told apart from two titles
when the link is read back; this is a known limitation of the link format.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..models import Show

FAVORITES_PARAM = "favorites"


def resolve_titles(favorite_ids: Iterable[int], shows: Sequence[Show]) -> list[str]:
    """Map show ids to titles; ids missing from ``shows`` become ``""``."""

    titles_by_id = {show.id: show.title for show in shows}
    return [titles_by_id.get(show_id, "") for show_id in favorite_ids]


def encode(favorite_ids: Iterable[int], shows: Sequence[Show], base_url: str) -> str:
    """Return ``base_url`` with its query replaced by the favorites parameter."""

    base = base_url.split("?", 1)[0]
    titles = ",".join(resolve_titles(favorite_ids, shows))
    return f"{base}?{FAVORITES_PARAM}={titles}"


def decode(url: str) -> list[str]:
    """Return the titles carried by a link produced with :func:`encode`."""

    _, separator, query = url.partition("?")
    if not separator:
        return []
    prefix = f"{FAVORITES_PARAM}="
    if not query.startswith(prefix):
        return []
    value = query[len(prefix):]
    if not value:
        return []
    return value.split(",")
