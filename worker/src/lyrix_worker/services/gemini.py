"""Gemini generation backend built on the google-genai SDK."""

from __future__ import annotations

import asyncio
import base64
from typing import Any, AsyncIterator, Optional

from google import genai
from google.genai import types as genai_types
from loguru import logger

from ..app.models import GenerationParameters
from ..app.settings import Settings
from .exceptions import (
    GenerationFailure,
    GenerationInterrupted,
    ImageGenerationFailed,
    SectionRedoFailed,
)
from .prompts import (
    build_artist_prompt,
    build_cover_art_prompt,
    build_section_prompt,
    build_song_prompt,
)
from .types import BackendStatus


class GeminiService:
    """Text and image generation through Gemini models."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        client: Optional[Any] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._client = client
        self._client_error: Optional[str] = None
        self._lock = asyncio.Lock()

    async def warmup(self) -> BackendStatus:
        details = {
            "text_model_id": self._settings.text_model_id,
            "section_model_id": self._settings.section_model_id,
            "image_model_id": self._settings.image_model_id,
        }
        client, reason = await self._ensure_client()
        return BackendStatus(
            name="gemini",
            ready=client is not None,
            error=reason,
            details=details,
        )

    async def stream_song(self, parameters: GenerationParameters) -> AsyncIterator[str]:
        client = await self._require_client(GenerationInterrupted)
        prompt = build_song_prompt(parameters)
        logger.info(
            "streaming song via {} (genre={}, mood={})",
            self._settings.text_model_id,
            parameters.genre,
            parameters.mood,
        )
        try:
            stream = await client.aio.models.generate_content_stream(
                model=self._settings.text_model_id,
                contents=prompt,
            )
            async for chunk in stream:
                text = getattr(chunk, "text", None)
                if text:
                    yield text
        except GenerationFailure:
            raise
        except Exception as exc:  # noqa: BLE001
            raise GenerationInterrupted(str(exc) or exc.__class__.__name__) from exc

    async def rewrite_section(
        self,
        label: str,
        transcript: str,
        parameters: GenerationParameters,
    ) -> str:
        client = await self._require_client(GenerationFailure)
        prompt = build_section_prompt(label, transcript, parameters)
        try:
            response = await client.aio.models.generate_content(
                model=self._settings.section_model_id,
                contents=prompt,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("section rewrite failed for {!r}: {}", label, exc)
            raise SectionRedoFailed(label, str(exc) or exc.__class__.__name__) from exc
        return (getattr(response, "text", None) or "").strip()

    async def generate_cover_art(self, title: str, genre: str, mood: str) -> Optional[str]:
        client = await self._require_client(ImageGenerationFailed)
        prompt = build_cover_art_prompt(title, genre, mood)
        config = genai_types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=genai_types.ImageConfig(
                aspect_ratio=self._settings.cover_art_aspect_ratio,
            ),
        )
        try:
            response = await client.aio.models.generate_content(
                model=self._settings.image_model_id,
                contents=prompt,
                config=config,
            )
        except Exception as exc:  # noqa: BLE001
            raise ImageGenerationFailed(str(exc) or exc.__class__.__name__) from exc
        return self._first_inline_image(response)

    async def suggest_artist(self, genre: str) -> str:
        client = await self._require_client(GenerationFailure)
        try:
            response = await client.aio.models.generate_content(
                model=self._settings.artist_model_id,
                contents=build_artist_prompt(genre),
            )
        except Exception as exc:  # noqa: BLE001
            raise GenerationFailure(str(exc) or exc.__class__.__name__) from exc
        return (getattr(response, "text", None) or "").strip()

    async def _ensure_client(self) -> tuple[Optional[Any], Optional[str]]:
        async with self._lock:
            if self._client is not None:
                return self._client, None
            if self._client_error is not None:
                return None, self._client_error
            api_key = self._settings.gemini_api_key
            if not api_key:
                self._client_error = "missing_api_key"
                logger.warning("Gemini unavailable: no API key configured")
                return None, self._client_error
            try:
                self._client = genai.Client(api_key=api_key)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Failed to create Gemini client")
                self._client_error = f"client_error:{exc.__class__.__name__}"
                return None, self._client_error
            return self._client, None

    async def _require_client(self, failure: type[GenerationFailure]) -> Any:
        client, reason = await self._ensure_client()
        if client is None:
            raise failure(f"generation provider unavailable ({reason})")
        return client

    @staticmethod
    def _first_inline_image(response: Any) -> Optional[str]:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return None
        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is None or not inline.data:
                continue
            data = inline.data
            if isinstance(data, str):
                encoded = data
            else:
                encoded = base64.b64encode(data).decode("ascii")
            mime_type = inline.mime_type or "image/png"
            return f"data:{mime_type};base64,{encoded}"
        return None
