from __future__ import annotations

from typing import AsyncIterator

from ondevice_ai.core.chains.base import stream_model
from ondevice_ai.core.chains.results import TranslateResult
from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.prompts.builtin import TRANSLATE, strip_preamble
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig

LANGUAGE_NAMES = {
    "ar": "Arabic",
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "hi": "Hindi",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "nl": "Dutch",
    "pl": "Polish",
    "pt": "Portuguese",
    "ru": "Russian",
    "th": "Thai",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "vi": "Vietnamese",
    "zh": "Chinese",
}


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code.lower().split("-")[0], code)


class TranslateChain:
    name = "TranslateChain"

    def __init__(
        self,
        model: LanguageModel,
        target_language: str,
        source_language: str = "en",
        config: GenerationConfig | None = None,
    ) -> None:
        if not target_language:
            raise ValidationError("TranslateChain requires a target language")
        self.model = model
        self.target_language = target_language
        self.source_language = source_language
        self.config = config or GenerationConfig.STRUCTURED

    def build_prompt(self, input: ChainInput) -> str:
        return TRANSLATE.format(
            {
                "text": input.text,
                "source_language": language_name(self.source_language),
                "target_language": language_name(self.target_language),
            }
        )

    async def invoke(self, input: ChainInput) -> ChainOutput:
        response = await self.model.generate(self.build_prompt(input), self.config)
        translated = strip_preamble(response.text)
        return ChainOutput(
            text=translated,
            raw=response.text,
            value=TranslateResult(
                translated_text=translated,
                source_language=self.source_language,
                target_language=self.target_language,
            ),
            metadata=dict(input.metadata),
            processing_time_ms=response.processing_time_ms,
        )

    def stream_invoke(self, input: ChainInput) -> AsyncIterator[str]:
        return stream_model(self.model, self.build_prompt(input), self.config)

    async def run(self, text: str) -> TranslateResult:
        return (await self.invoke(ChainInput(text=text))).value
