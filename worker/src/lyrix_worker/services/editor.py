"""In-place regeneration of a single song section."""

from __future__ import annotations

from typing import List, Optional, Protocol

from loguru import logger

from ..app.models import GenerationParameters
from .exceptions import SectionRedoFailed
from .parser import is_header_line, section_label


class SectionWriter(Protocol):
    async def rewrite_section(
        self,
        label: str,
        transcript: str,
        parameters: GenerationParameters,
    ) -> str:
        ...


def split_transcript(raw: str) -> List[str]:
    """Split into alternating ``[text, marker, text, marker, ..., text]`` parts.

    Marker lines are exactly the lines ``parse_song`` treats as section
    markers; a marker part carries no line ending, so the text part after it
    starts with ``"\\n"``. Joining the parts gives back ``raw``.
    """
    parts = [""]
    lines = raw.split("\n")
    last = len(lines) - 1
    for index, line in enumerate(lines):
        ending = "\n" if index < last else ""
        if section_label(line) is not None:
            parts.append(line)
            parts.append(ending)
        else:
            parts[-1] += line + ending
    return parts


def find_section(parts: List[str], label: str) -> Optional[int]:
    for index in range(1, len(parts), 2):
        if section_label(parts[index]) == label:
            return index
    return None


def has_section(raw: str, label: str) -> bool:
    return find_section(split_transcript(raw), label) is not None


def splice_section(raw: str, label: str, replacement: str) -> str:
    """Replace the first ``[label]`` section of ``raw`` with ``replacement``.

    Every other part of the transcript is kept verbatim. Returns ``raw``
    unchanged when the label does not occur.
    """
    parts = split_transcript(raw)
    index = find_section(parts, label)
    if index is None:
        return raw

    tag = f"[{label}]"
    body = replacement.strip()
    first_line = body.split("\n", 1)[0].strip()
    if first_line != tag:
        body = f"{tag}\n{body}" if body else tag

    old_body = parts[index + 1]
    headers = [line.strip() for line in old_body.split("\n") if is_header_line(line)]
    if headers:
        body = "\n".join([body, *headers])

    if index + 2 < len(parts) or old_body.endswith("\n"):
        body += "\n"

    parts[index] = body
    parts[index + 1] = ""
    return "".join(parts)


async def redo_section(
    label: str,
    current_raw: str,
    parameters: GenerationParameters,
    writer: SectionWriter,
) -> str:
    """Ask ``writer`` for a fresh ``label`` section and splice it into the transcript."""
    if not has_section(current_raw, label):
        logger.info("redo skipped: section {!r} not in transcript", label)
        return current_raw

    replacement = await writer.rewrite_section(label, current_raw, parameters)
    if not replacement.strip():
        raise SectionRedoFailed(label, "provider returned an empty section")
    return splice_section(current_raw, label, replacement)
