"""Prompt text sent to the generation provider."""

from __future__ import annotations

from ..app.models import GenerationParameters
from .catalog import AUTO_CHOICE

EXPLICIT_POLICY = (
    "EXPLICIT (18+). You are allowed to use strong language, adult themes, "
    "and raw, uncensored emotions."
)
CLEAN_POLICY = "CLEAN/RADIO-FRIENDLY. Avoid profanity and overly graphic adult themes."


def content_policy(parameters: GenerationParameters) -> str:
    return EXPLICIT_POLICY if parameters.is_explicit else CLEAN_POLICY


def vocal_profile(parameters: GenerationParameters, *, auto_hint: str) -> str:
    if parameters.vocal_style == AUTO_CHOICE:
        return auto_hint
    return parameters.vocal_style


def instrumental_profile(parameters: GenerationParameters, *, auto_hint: str) -> str:
    if parameters.instrumental_profile == AUTO_CHOICE:
        return auto_hint
    return parameters.instrumental_profile


def build_song_prompt(parameters: GenerationParameters) -> str:
    if parameters.artist:
        artist_context = (
            f"EMULATE ARTIST STYLE: Write in the distinct lyrical style, vocabulary, and "
            f"structural approach of {parameters.artist}. Use their typical metaphors, "
            f"rhythmic patterns, and vocabulary common to their North American discography."
        )
    else:
        artist_context = "STYLE: Generic high-quality songwriting."

    vocals = vocal_profile(
        parameters,
        auto_hint="Determine the most effective vocal texture based on genre and mood.",
    )
    instruments = instrumental_profile(
        parameters,
        auto_hint="Determine the most effective instrumental profile based on genre and mood.",
    )
    bridge = "true" if parameters.include_bridge else "false"
    structure = "[Intro], [Verse 1], [Chorus], [Verse 2], "
    structure += "[Bridge], [Outro]" if parameters.include_bridge else "[Outro]"

    return "\n".join(
        [
            "Write a song optimized for Suno AI.",
            f"Topic: {parameters.topic.strip()}",
            f"Genre: {parameters.genre}",
            f"Mood: {parameters.mood}",
            artist_context,
            f"VOCAL DNA: {vocals}. INSTRUMENTAL DNA: {instruments}.",
            f"Include Bridge: {bridge}",
            f"Language: {parameters.language}",
            f"Content Policy: {content_policy(parameters)}",
            "",
            "CRITICAL FORMATTING INSTRUCTIONS (Do not deviate):",
            '1. Start with "TITLE: [The Song Title]"',
            '2. Follow with "STYLE: [A Suno-compatible style prompt, max 100 chars, blending '
            'genre, mood, vocal profile, instrumental profile, and artist vibe]"',
            f"3. Then write the lyrics using clear bracketed meta-tags: {structure}.",
            "   - Adjust syllable density and rhythm based on the chosen Sonic DNA.",
            '4. Finally, end with "EXPLANATION: [A brief 2-sentence breakdown of the song '
            'structure and how the Sonic DNA (even if auto-determined) was applied]".',
            "",
            "Write the song now, streaming it line by line.",
        ]
    )


def build_section_prompt(
    label: str,
    transcript: str,
    parameters: GenerationParameters,
) -> str:
    vocals = vocal_profile(
        parameters, auto_hint="Determine the best texture for this song"
    )
    instruments = instrumental_profile(
        parameters, auto_hint="Determine the best profile for this song"
    )
    lines = [
        "You are a professional songwriter. I have a song in progress, and I need you "
        f"to rewrite ONLY the [{label}] section.",
        "",
        "CURRENT SONG CONTEXT:",
        transcript,
        "",
        f"GENRE: {parameters.genre}",
        f"MOOD: {parameters.mood}",
        f"VOCAL STYLE: {vocals}",
        f"INSTRUMENTAL DNA: {instruments}",
        f"Content Policy: {content_policy(parameters)}",
    ]
    if parameters.artist:
        lines.append(f"Keep the style of {parameters.artist}.")
    lines.extend(
        [
            "",
            "INSTRUCTIONS:",
            f"1. Rewrite only the [{label}] section.",
            "2. Maintain the theme and narrative flow of the rest of the song.",
            "3. Keep the rhythmic structure similar so it fits the music.",
            f"4. Return ONLY the new section starting with [{label}] and ending with the "
            "lyrics. Do not include other sections.",
        ]
    )
    return "\n".join(lines)


def build_cover_art_prompt(title: str, genre: str, mood: str) -> str:
    return "\n".join(
        [
            f'Professional album cover art for a song titled "{title}".',
            f"Musical Genre: {genre}.",
            f"Mood: {mood}.",
            "Art style: Modern, cinematic, abstract representation, high resolution, 4k.",
            "NO TEXT on the image. Vivid colors reflecting the mood.",
        ]
    )


def build_artist_prompt(genre: str) -> str:
    return (
        "Suggest one famous music artist or band from the United States or Canada that "
        f"is either a legendary icon, a rising star, or an experimental pioneer in the "
        f"{genre} genre.\n"
        "Be specific and choose someone with a distinct lyrical or musical style known "
        "in North America.\n"
        "Return ONLY the name of the artist, nothing else. No punctuation, no quotes."
    )
