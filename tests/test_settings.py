"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest

from factories import build_settings


def test_defaults_point_at_public_podcast_api() -> None:
    settings = build_settings()

    assert str(settings.podcast_api_url).startswith("https://podcast-api.netlify.app")
    assert settings.sync_enabled is False
    assert settings.sync_table == "The Audio Lounge"
    assert settings.sync_record_key == "showId"
    assert settings.sync_titles_column == "titles"
    assert settings.sync_owner_id == "audio-lounge"
    assert settings.search_threshold == 60.0


def test_supabase_aliases_enable_sync() -> None:
    """Legacy Supabase variable names should still configure the mirror."""

    settings = build_settings(
        SUPABASE_URL="https://project.supabase.co", SUPABASE_KEY="anon-key"
    )

    assert settings.sync_enabled is True
    assert settings.sync_api_key == "anon-key"


def test_blank_sync_table_rejected() -> None:
    with pytest.raises(ValueError, match="must not be blank"):
        build_settings(SYNC_TABLE="   ")
    with pytest.raises(ValueError, match="must not be blank"):
        build_settings(SYNC_OWNER_ID="")


def test_search_threshold_bounds() -> None:
    with pytest.raises(ValueError):
        build_settings(SEARCH_THRESHOLD=150)

    assert build_settings(SEARCH_THRESHOLD="75").search_threshold == 75.0
