from __future__ import annotations

from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

from lyrix_worker.app.models import GenerationParameters
from lyrix_worker.app.settings import Settings
from lyrix_worker.services.exceptions import (
    GenerationFailure,
    GenerationInterrupted,
    ImageGenerationFailed,
    SectionRedoFailed,
)
from lyrix_worker.services.gemini import GeminiService


class FakeModels:
    def __init__(
        self,
        *,
        chunks: Optional[List[Any]] = None,
        stream_error: Optional[Exception] = None,
        response: Any = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.chunks = chunks or []
        self.stream_error = stream_error
        self.response = response
        self.error = error
        self.calls: List[dict[str, Any]] = []

    async def generate_content_stream(self, **kwargs: Any):
        self.calls.append(kwargs)
        return self._stream()

    async def _stream(self):
        for chunk in self.chunks:
            yield chunk
        if self.stream_error is not None:
            raise self.stream_error

    async def generate_content(self, **kwargs: Any):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _service(settings: Settings, models: FakeModels) -> GeminiService:
    client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return GeminiService(settings, client=client)


def _text(value: Optional[str]) -> SimpleNamespace:
    return SimpleNamespace(text=value)


@pytest.mark.asyncio
async def test_stream_song_yields_text_chunks(settings: Settings) -> None:
    models = FakeModels(chunks=[_text("TITLE: A\n"), _text(None), _text("[Verse]\n")])
    service = _service(settings, models)

    received = [chunk async for chunk in service.stream_song(GenerationParameters(topic="rain"))]

    assert received == ["TITLE: A\n", "[Verse]\n"]
    assert models.calls[0]["model"] == settings.text_model_id
    assert "Topic: rain" in models.calls[0]["contents"]


@pytest.mark.asyncio
async def test_stream_song_reports_interruption(settings: Settings) -> None:
    models = FakeModels(chunks=[_text("TITLE: A\n")], stream_error=ConnectionError("reset"))
    service = _service(settings, models)
    received: List[str] = []

    with pytest.raises(GenerationInterrupted, match="reset"):
        async for chunk in service.stream_song(GenerationParameters(topic="rain")):
            received.append(chunk)

    assert received == ["TITLE: A\n"]


@pytest.mark.asyncio
async def test_rewrite_section_strips_and_wraps_errors(settings: Settings) -> None:
    service = _service(settings, FakeModels(response=_text("\n[Chorus]\nnew hook\n")))
    text = await service.rewrite_section("Chorus", "[Chorus]\nold", GenerationParameters())
    assert text == "[Chorus]\nnew hook"

    failing = _service(settings, FakeModels(error=RuntimeError("quota")))
    with pytest.raises(SectionRedoFailed) as excinfo:
        await failing.rewrite_section("Chorus", "[Chorus]\nold", GenerationParameters())
    assert excinfo.value.label == "Chorus"


@pytest.mark.asyncio
async def test_cover_art_returns_data_uri(settings: Settings) -> None:
    inline = SimpleNamespace(data=b"\x89PNG", mime_type="image/png")
    response = SimpleNamespace(
        candidates=[
            SimpleNamespace(
                content=SimpleNamespace(
                    parts=[SimpleNamespace(inline_data=None), SimpleNamespace(inline_data=inline)]
                )
            )
        ]
    )
    models = FakeModels(response=response)
    service = _service(settings, models)

    image = await service.generate_cover_art("Neon Heart", "Synthwave", "Dark")

    assert image == "data:image/png;base64,iVBORw=="
    assert models.calls[0]["model"] == settings.image_model_id
    assert models.calls[0]["config"].response_modalities == ["IMAGE"]


@pytest.mark.asyncio
async def test_cover_art_without_image_or_with_error(settings: Settings) -> None:
    empty = _service(settings, FakeModels(response=SimpleNamespace(candidates=[])))
    assert await empty.generate_cover_art("T", "Pop", "Happy") is None

    failing = _service(settings, FakeModels(error=RuntimeError("blocked")))
    with pytest.raises(ImageGenerationFailed):
        await failing.generate_cover_art("T", "Pop", "Happy")


@pytest.mark.asyncio
async def test_missing_api_key_marks_backend_unready(settings: Settings) -> None:
    service = GeminiService(settings)

    status = await service.warmup()

    assert status.ready is False
    assert status.error == "missing_api_key"
    with pytest.raises(GenerationFailure):
        await service.suggest_artist("Pop")
    with pytest.raises(GenerationInterrupted):
        async for _ in service.stream_song(GenerationParameters(topic="rain")):
            pass
