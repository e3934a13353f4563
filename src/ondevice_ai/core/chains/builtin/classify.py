from __future__ import annotations

import logging
from typing import AsyncIterator, Sequence

from ondevice_ai.core.chains.base import stream_model
from ondevice_ai.core.chains.results import Classification, ClassifyResult
from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.prompts.builtin import CLASSIFY
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig

logger = logging.getLogger("ondevice_ai.chains.classify")

DEFAULT_CATEGORIES = ("positive", "negative", "neutral")


class ClassifyChain:
    name = "ClassifyChain"

    def __init__(
        self,
        model: LanguageModel,
        categories: Sequence[str] = DEFAULT_CATEGORIES,
        max_results: int = 3,
        config: GenerationConfig | None = None,
    ) -> None:
        if not categories:
            raise ValidationError("ClassifyChain requires at least one category")
        self.model = model
        self.categories = [category.lower() for category in categories]
        self.max_results = max(1, max_results)
        self.config = config or GenerationConfig.STRUCTURED

    def build_prompt(self, input: ChainInput) -> str:
        return CLASSIFY.format({"text": input.text, "categories": ", ".join(self.categories)})

    async def invoke(self, input: ChainInput) -> ChainOutput:
        response = await self.model.generate(self.build_prompt(input), self.config)
        raw = response.text.strip()
        classifications = self.parse(raw)
        logger.debug(
            "classify_parsed",
            extra={"extra_fields": {"labels": [item.label for item in classifications]}},
        )
        result = ClassifyResult(classifications=classifications, top_classification=classifications[0])
        return ChainOutput(
            text=result.top_classification.label,
            raw=response.text,
            value=result,
            metadata=dict(input.metadata),
            processing_time_ms=response.processing_time_ms,
        )

    def parse(self, text: str) -> list[Classification]:
        parsed: list[Classification] = []
        for line in text.splitlines():
            label, sep, score_text = line.strip().rpartition(":")
            if not sep:
                continue
            label = label.strip().lower()
            if label not in self.categories:
                continue
            try:
                score = float(score_text.strip())
            except ValueError:
                score = 0.0
            parsed.append(Classification(label=label, score=score))

        if not parsed:
            lowered = text.lower()
            match = next((category for category in self.categories if category in lowered), None)
            parsed = [Classification(label=match if match is not None else text, score=1.0)]

        parsed.sort(key=lambda item: item.score, reverse=True)
        return parsed[: self.max_results]

    def stream_invoke(self, input: ChainInput) -> AsyncIterator[str]:
        return stream_model(self.model, self.build_prompt(input), self.config)

    async def run(self, text: str) -> ClassifyResult:
        return (await self.invoke(ChainInput(text=text))).value
