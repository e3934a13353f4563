from __future__ import annotations

from typing import AsyncIterator, Protocol, runtime_checkable

from ondevice_ai.core.schemas import GenerationConfig, ModelResponse


@runtime_checkable
class LanguageModel(Protocol):
    """Narrow capability interface over an inference backend.

    ``generate`` raises ``ModelError`` when the backend fails or is unavailable.
    ``stream`` returns a lazy, finite, non-restartable async iterator of text
    chunks and raises ``ModelError`` mid-sequence if the backend stream errors.
    """

    name: str
    is_ready: bool
    max_context_tokens: int

    async def generate(self, prompt: str, config: GenerationConfig | None = None) -> ModelResponse: ...

    def stream(self, prompt: str, config: GenerationConfig | None = None) -> AsyncIterator[str]: ...


async def close_stream(stream: AsyncIterator[str]) -> None:
    aclose = getattr(stream, "aclose", None)
    if aclose is not None:
        await aclose()
