"""Turns a (possibly half-streamed) song transcript into structured fields.

The transcript follows the provider's line-oriented format::

    TITLE: <title>
    STYLE: <style tag>
    [Verse 1]
    ...lyric lines...
    EXPLANATION: <rationale>

``parse_song`` is re-run from scratch on every streamed chunk, so it must stay
a pure function of its input.
"""

from __future__ import annotations

from typing import List, Optional

from ..app.models import ParsedSong, SongSection

TITLE_PREFIX = "TITLE:"
STYLE_PREFIX = "STYLE:"
EXPLANATION_PREFIX = "EXPLANATION:"
HEADER_PREFIXES = (TITLE_PREFIX, STYLE_PREFIX, EXPLANATION_PREFIX)


def section_label(line: str) -> Optional[str]:
    """Return the label of a ``[Label]`` marker line, else ``None``."""
    stripped = line.strip()
    if len(stripped) >= 2 and stripped.startswith("[") and stripped.endswith("]"):
        return stripped[1:-1]
    return None


def is_header_line(line: str) -> bool:
    return line.strip().startswith(HEADER_PREFIXES)


def parse_song(raw: str) -> ParsedSong:
    title = ""
    style_tag = ""
    explanation = ""
    sections: List[SongSection] = []
    label: Optional[str] = None
    content: List[str] = []

    def flush() -> None:
        if label:
            text = "\n".join(content).strip()
            if text:
                sections.append(SongSection(label=label, text=text))

    for line in raw.split("\n"):
        stripped = line.strip()
        if stripped.startswith(TITLE_PREFIX):
            title = stripped[len(TITLE_PREFIX):].strip()
            continue
        if stripped.startswith(STYLE_PREFIX):
            style_tag = stripped[len(STYLE_PREFIX):].strip()
            continue
        if stripped.startswith(EXPLANATION_PREFIX):
            explanation = stripped[len(EXPLANATION_PREFIX):].strip()
            continue
        marker = section_label(line)
        if marker is not None:
            flush()
            label = marker
            content = []
            continue
        if label:
            content.append(line)
    flush()

    return ParsedSong(
        title=title,
        style_tag=style_tag,
        sections=sections,
        explanation=explanation,
    )


def extract_complete_title(raw: str) -> Optional[str]:
    """First non-empty ``TITLE:`` value whose line has been fully received."""
    complete_lines = raw.split("\n")[:-1]
    for line in complete_lines:
        stripped = line.strip()
        if stripped.startswith(TITLE_PREFIX):
            title = stripped[len(TITLE_PREFIX):].strip()
            if title:
                return title
    return None


def clean_lyrics(raw: str) -> str:
    """Transcript without its first TITLE, STYLE and EXPLANATION lines."""
    lines = raw.split("\n")
    for prefix in HEADER_PREFIXES:
        for index, line in enumerate(lines):
            if line.strip().startswith(prefix):
                del lines[index]
                break
    return "\n".join(lines).strip()
