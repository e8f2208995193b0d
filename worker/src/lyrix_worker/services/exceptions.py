"""Shared service-layer exceptions."""

from __future__ import annotations

from typing import Optional

TOPIC_REQUIRED_MESSAGE = "Please enter a topic or theme for your song."
INTERRUPTED_MESSAGE = "The composition was interrupted. Please try again."


class InvalidParametersError(ValueError):
    """Generation parameters rejected before any provider call."""


class GenerationFailure(Exception):
    """Expected failure while talking to the generation provider."""


class GenerationInterrupted(GenerationFailure):
    """The streamed song failed part-way through."""


class SectionRedoFailed(GenerationFailure):
    """A single-section rewrite could not be produced."""

    def __init__(self, label: str, reason: str) -> None:
        super().__init__(reason)
        self.label = label


class ImageGenerationFailed(GenerationFailure):
    """Cover art could not be rendered."""


class PersistenceFailed(Exception):
    """The song library rejected a read or write."""


class SessionBusyError(Exception):
    """Raised when a generation or redo is already in flight for a session."""

    def __init__(self, session_id: str, busy: Optional[str]) -> None:
        super().__init__(f"session {session_id} is busy ({busy})")
        self.session_id = session_id
        self.busy = busy


class NotSignedInError(Exception):
    """Library operations require a signed-in identity."""


class UnknownSongError(Exception):
    """Raised when a saved song lookup fails."""

    def __init__(self, song_id: str) -> None:
        super().__init__(song_id)
        self.song_id = song_id
