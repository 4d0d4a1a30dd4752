"""Fuzzy title search over the show catalog."""

from __future__ import annotations

from typing import Sequence

from rapidfuzz import fuzz, process, utils

from ..models import Show

DEFAULT_THRESHOLD = 60.0


class SearchIndex:
    """Typo-tolerant title matcher built on rapidfuzz's weighted ratio."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        if not 0 <= threshold <= 100:
            raise ValueError("Search threshold must be between 0 and 100")
        self.threshold = threshold

    def search(self, query: str, shows: Sequence[Show]) -> list[Show]:
        """Return shows whose title matches ``query``, best match first."""

        if not query or not query.strip() or not shows:
            return []

        matches = process.extract(
            query,
            [show.title for show in shows],
            scorer=fuzz.WRatio,
            processor=utils.default_process,
            score_cutoff=self.threshold,
            limit=None,
        )
        # Stable on ties so equally good matches keep catalog order.
        ranked = sorted(matches, key=lambda match: (-match[1], match[2]))
        return [shows[index] for _, _, index in ranked]
