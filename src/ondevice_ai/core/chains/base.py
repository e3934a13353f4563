from __future__ import annotations

import inspect
import time
from typing import Any, AsyncIterator, Awaitable, Callable, Protocol, Union, runtime_checkable

from ondevice_ai.core.models.base import LanguageModel, close_stream
from ondevice_ai.core.prompts.template import PromptTemplate
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig


@runtime_checkable
class Chain(Protocol):
    """Anything with a ``name`` and an async ``invoke`` composes as a chain."""

    name: str

    async def invoke(self, input: ChainInput) -> ChainOutput: ...


@runtime_checkable
class StreamingChain(Chain, Protocol):
    def stream_invoke(self, input: ChainInput) -> AsyncIterator[str]: ...


async def stream_model(model: LanguageModel, prompt: str, config: GenerationConfig | None) -> AsyncIterator[str]:
    """Forward model chunks, closing the model stream when the consumer stops early."""
    chunks = model.stream(prompt, config)
    try:
        async for chunk in chunks:
            yield chunk
    finally:
        await close_stream(chunks)


class OutputParser(Protocol):
    format_instructions: str

    def parse(self, text: str) -> Any: ...


class ModelChain:
    """Send the (optionally templated) input to a model and return its text.

    With a ``parser`` the parsed result becomes ``value`` and its format
    instructions are appended to the prompt.
    """

    def __init__(
        self,
        model: LanguageModel,
        template: PromptTemplate | None = None,
        config: GenerationConfig | None = None,
        name: str = "ModelChain",
        parser: OutputParser | None = None,
    ) -> None:
        self.model = model
        self.template = template
        self.config = config
        self.name = name
        self.parser = parser

    def build_prompt(self, input: ChainInput) -> str:
        if self.template is None:
            prompt = input.text
        else:
            values: dict[str, str] = dict(input.metadata)
            values["text"] = input.text
            prompt = self.template.format(values)
        if self.parser is not None and self.parser.format_instructions:
            prompt = f"{prompt}\n\n{self.parser.format_instructions}"
        return prompt

    async def invoke(self, input: ChainInput) -> ChainOutput:
        prompt = self.build_prompt(input)
        response = await self.model.generate(prompt, self.config)
        value = self.parser.parse(response.text) if self.parser is not None else response.text
        return ChainOutput(
            text=response.text,
            raw=response.text,
            value=value,
            metadata=dict(input.metadata),
            processing_time_ms=response.processing_time_ms,
        )

    def stream_invoke(self, input: ChainInput) -> AsyncIterator[str]:
        return stream_model(self.model, self.build_prompt(input), self.config)


TextFunction = Callable[[str], Union[str, Awaitable[str]]]


class FunctionChain:
    """Adapt a plain ``str -> str`` callable (sync or async) into a chain."""

    def __init__(self, name: str, fn: TextFunction) -> None:
        self.name = name
        self.fn = fn

    async def invoke(self, input: ChainInput) -> ChainOutput:
        start = time.perf_counter()
        result = self.fn(input.text)
        if inspect.isawaitable(result):
            result = await result
        text = str(result)
        return ChainOutput(
            text=text,
            raw=text,
            value=text,
            metadata=dict(input.metadata),
            processing_time_ms=int((time.perf_counter() - start) * 1000),
        )
