from __future__ import annotations

import logging
from typing import AsyncIterator

from ondevice_ai.core.chains.base import stream_model
from ondevice_ai.core.chains.results import SummarizeResult
from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.prompts.builtin import SUMMARIZE, strip_preamble
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig

logger = logging.getLogger("ondevice_ai.chains.summarize")

_BULLET_PREFIXES = ("* ", "- ", "• ")


class SummarizeChain:
    name = "SummarizeChain"

    def __init__(
        self,
        model: LanguageModel,
        bullet_count: int = 1,
        input_type: str = "text",
        config: GenerationConfig | None = None,
    ) -> None:
        if bullet_count < 1:
            raise ValidationError("bullet_count must be at least 1")
        self.model = model
        self.bullet_count = bullet_count
        self.input_type = input_type
        self.config = config or GenerationConfig.STRUCTURED

    def build_prompt(self, input: ChainInput) -> str:
        return SUMMARIZE.format({"text": input.text, "bullet_count": self.bullet_count, "input_type": self.input_type})

    async def invoke(self, input: ChainInput) -> ChainOutput:
        response = await self.model.generate(self.build_prompt(input), self.config)
        raw = response.text
        bullets = parse_bullets(raw)[: self.bullet_count]
        summary = "\n".join(bullets) if bullets else strip_preamble(raw)
        logger.debug("summarize_parsed", extra={"extra_fields": {"bullets": len(bullets)}})
        result = SummarizeResult(
            summary=summary,
            bullets=bullets,
            original_length=len(input.text),
            summary_length=len(summary),
        )
        return ChainOutput(
            text=summary,
            raw=raw,
            value=result,
            metadata=dict(input.metadata),
            processing_time_ms=response.processing_time_ms,
        )

    def stream_invoke(self, input: ChainInput) -> AsyncIterator[str]:
        return stream_model(self.model, self.build_prompt(input), self.config)

    async def run(self, text: str) -> SummarizeResult:
        return (await self.invoke(ChainInput(text=text))).value


def parse_bullets(text: str) -> list[str]:
    bullets: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        for prefix in _BULLET_PREFIXES:
            if stripped.startswith(prefix):
                item = stripped[len(prefix) :].strip()
                if item:
                    bullets.append(item)
                break
    return bullets
