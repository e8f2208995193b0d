from __future__ import annotations

import pytest
from pydantic import ValidationError

from lyrix_worker.app.models import GenerationParameters
from lyrix_worker.services.catalog import AUTO_CHOICE, quick_artists, search_artists
from lyrix_worker.services.prompts import (
    CLEAN_POLICY,
    EXPLICIT_POLICY,
    build_cover_art_prompt,
    build_section_prompt,
    build_song_prompt,
)


def test_search_artists_requires_two_characters() -> None:
    assert search_artists("") == []
    assert search_artists("t") == []
    matches = search_artists("taylor")
    assert matches[0] == "Taylor Swift"
    assert len(matches) == len(set(matches))


def test_search_artists_respects_limit() -> None:
    assert len(search_artists("an", limit=3)) == 3


def test_quick_artists_by_genre() -> None:
    assert quick_artists("Hip Hop") == ["Kendrick Lamar", "Drake", "Eminem", "Jay-Z"]
    assert quick_artists("Unknown Genre") == []


def test_parameters_reject_values_outside_catalog() -> None:
    with pytest.raises(ValidationError):
        GenerationParameters(genre="Polka")
    assert GenerationParameters(artist="   ").artist is None


def test_song_prompt_reflects_parameters() -> None:
    prompt = build_song_prompt(
        GenerationParameters(
            topic="  summer rain ",
            genre="Indie",
            mood="Nostalgic",
            artist="Mitski",
            include_bridge=False,
            is_explicit=True,
        )
    )
    assert "Topic: summer rain" in prompt
    assert "EMULATE ARTIST STYLE" in prompt and "Mitski" in prompt
    assert "Include Bridge: false" in prompt
    assert "[Bridge]" not in prompt
    assert EXPLICIT_POLICY in prompt
    assert "Determine the most effective vocal texture" in prompt


def test_song_prompt_defaults_are_clean_with_bridge() -> None:
    prompt = build_song_prompt(GenerationParameters(topic="home"))
    assert CLEAN_POLICY in prompt
    assert "[Bridge], [Outro]" in prompt
    assert "Generic high-quality songwriting" in prompt


def test_section_prompt_names_label_and_policy() -> None:
    parameters = GenerationParameters(vocal_style="Whispering", is_explicit=False)
    assert parameters.instrumental_profile == AUTO_CHOICE
    prompt = build_section_prompt("Chorus", "[Chorus]\nold hook", parameters)
    assert "rewrite ONLY the [Chorus] section" in prompt
    assert "VOCAL STYLE: Whispering" in prompt
    assert CLEAN_POLICY in prompt
    assert "[Chorus]\nold hook" in prompt


def test_cover_art_prompt_forbids_text() -> None:
    prompt = build_cover_art_prompt("Neon Heart", "Synthwave", "Dark")
    assert '"Neon Heart"' in prompt
    assert "NO TEXT" in prompt
