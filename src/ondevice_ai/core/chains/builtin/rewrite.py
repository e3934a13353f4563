from __future__ import annotations

from typing import AsyncIterator

from ondevice_ai.core.chains.base import stream_model
from ondevice_ai.core.chains.results import RewriteResult, RewriteStyle
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.prompts.builtin import REWRITE, strip_preamble
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig

STYLE_INSTRUCTIONS = {
    RewriteStyle.ELABORATE: "to be more detailed and elaborate.",
    RewriteStyle.EMOJIFY: "by adding fitting emojis throughout.",
    RewriteStyle.SHORTEN: "to be more concise.",
    RewriteStyle.FRIENDLY: "in a friendly, casual tone.",
    RewriteStyle.PROFESSIONAL: "in a professional, formal tone.",
    RewriteStyle.REPHRASE: "using different words while keeping the same meaning.",
}


class RewriteChain:
    name = "RewriteChain"

    def __init__(
        self,
        model: LanguageModel,
        style: RewriteStyle | str,
        config: GenerationConfig | None = None,
    ) -> None:
        self.model = model
        self.style = RewriteStyle(style)
        self.config = config or GenerationConfig.STRUCTURED

    def build_prompt(self, input: ChainInput) -> str:
        return REWRITE.format({"text": input.text, "style_instruction": STYLE_INSTRUCTIONS[self.style]})

    async def invoke(self, input: ChainInput) -> ChainOutput:
        response = await self.model.generate(self.build_prompt(input), self.config)
        rewritten = strip_preamble(response.text)
        return ChainOutput(
            text=rewritten,
            raw=response.text,
            value=RewriteResult(rewritten_text=rewritten, style=self.style),
            metadata=dict(input.metadata),
            processing_time_ms=response.processing_time_ms,
        )

    def stream_invoke(self, input: ChainInput) -> AsyncIterator[str]:
        return stream_model(self.model, self.build_prompt(input), self.config)

    async def run(self, text: str) -> RewriteResult:
        return (await self.invoke(ChainInput(text=text))).value
