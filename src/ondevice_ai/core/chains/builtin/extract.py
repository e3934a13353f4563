from __future__ import annotations

from typing import AsyncIterator, Sequence

from ondevice_ai.core.chains.base import stream_model
from ondevice_ai.core.chains.results import Entity, ExtractResult
from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.prompts.builtin import EXTRACT
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig

DEFAULT_ENTITY_TYPES = ("person", "location", "date", "organization")


class ExtractChain:
    name = "ExtractChain"

    def __init__(
        self,
        model: LanguageModel,
        entity_types: Sequence[str] = DEFAULT_ENTITY_TYPES,
        config: GenerationConfig | None = None,
    ) -> None:
        if not entity_types:
            raise ValidationError("ExtractChain requires at least one entity type")
        self.model = model
        self.entity_types = list(entity_types)
        self.config = config or GenerationConfig.STRUCTURED

    def build_prompt(self, input: ChainInput) -> str:
        return EXTRACT.format({"text": input.text, "entity_types": ", ".join(self.entity_types)})

    async def invoke(self, input: ChainInput) -> ChainOutput:
        response = await self.model.generate(self.build_prompt(input), self.config)
        text = response.text.strip()
        result = ExtractResult(entities=parse_entities(text))
        return ChainOutput(
            text=text,
            raw=response.text,
            value=result,
            metadata=dict(input.metadata),
            processing_time_ms=response.processing_time_ms,
        )

    def stream_invoke(self, input: ChainInput) -> AsyncIterator[str]:
        return stream_model(self.model, self.build_prompt(input), self.config)

    async def run(self, text: str) -> ExtractResult:
        return (await self.invoke(ChainInput(text=text))).value


def parse_entities(text: str) -> list[Entity]:
    entities: list[Entity] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        kind, sep, value = stripped.partition(":")
        if not sep:
            entities.append(Entity(type="extracted", value=stripped, confidence=0.8))
            continue
        value = value.strip()
        if value:
            entities.append(Entity(type=kind.strip().lower(), value=value, confidence=0.9))
    return entities
