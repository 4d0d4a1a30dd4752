"""Utility helpers for the Audio Lounge service."""

from __future__ import annotations

import unicodedata
from datetime import date, datetime, timezone


def collation_key(value: str) -> tuple[str, str]:
    """Return a locale-insensitive sort key for display titles.

    Accents are stripped and case folded so ``"Éclair"`` sorts beside
    ``"eclair"``; the raw value breaks ties deterministically.
    """

    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.casefold(), value


def parse_timestamp(value: object) -> datetime:
    """Coerce API timestamps into timezone-aware datetimes."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Invalid timestamp: {value!r}") from exc
    else:
        raise TypeError("Timestamps must be strings or datetimes")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_clock(moment: datetime) -> str:
    """Return the ``HH:MM`` wall-clock representation used for favorites."""

    return moment.strftime("%H:%M")
