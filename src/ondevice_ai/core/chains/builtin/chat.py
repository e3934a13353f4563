from __future__ import annotations

import logging
from typing import AsyncIterator

from ondevice_ai.core.chains.base import stream_model
from ondevice_ai.core.chains.results import ChatResult
from ondevice_ai.core.memory.base import Memory, format_history
from ondevice_ai.core.models.base import LanguageModel, close_stream
from ondevice_ai.core.prompts.builtin import CHAT
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig

logger = logging.getLogger("ondevice_ai.chains.chat")

DEFAULT_SYSTEM_PROMPT = "You are a friendly, helpful assistant."

# (first, last, language) code point ranges checked in order.
_SCRIPT_RANGES = (
    (0xAC00, 0xD7AF, "Korean"),
    (0x1100, 0x11FF, "Korean"),
    (0x3130, 0x318F, "Korean"),
    (0x3040, 0x309F, "Japanese"),
    (0x30A0, 0x30FF, "Japanese"),
    (0x4E00, 0x9FFF, "Chinese"),
    (0x0600, 0x06FF, "Arabic"),
    (0x0400, 0x04FF, "Russian"),
    (0x0E00, 0x0E7F, "Thai"),
)


def detect_language(text: str) -> str:
    """Guess the reply language from the script of ``text``.

    Latin-only text is treated as English; short Latin words are too ambiguous
    to tell apart reliably.
    """
    counts: dict[str, int] = {}
    for char in text:
        point = ord(char)
        for first, last, language in _SCRIPT_RANGES:
            if first <= point <= last:
                counts[language] = counts.get(language, 0) + 1
                break
    if not counts:
        return "English"
    # Kana alongside Han characters means Japanese.
    if counts.get("Japanese") and counts.get("Chinese"):
        return "Japanese"
    return max(counts, key=lambda language: counts[language])


class ChatChain:
    name = "ChatChain"

    def __init__(
        self,
        model: LanguageModel,
        memory: Memory | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        config: GenerationConfig | None = None,
    ) -> None:
        self.model = model
        self.memory = memory
        self.system_prompt = system_prompt
        self.config = config or GenerationConfig.CONVERSATIONAL

    async def build_prompt(self, input: ChainInput) -> str:
        history = ""
        if self.memory is not None:
            entries = await self.memory.load(input)
            if entries:
                history = format_history(entries) + "\n"
        language = detect_language(input.text)
        return CHAT.format(
            {
                "text": input.text,
                "system_prompt": f"System instruction: {self.system_prompt}",
                "history": history,
                "language_instruction": f"Reply in {language} only.",
            }
        )

    async def invoke(self, input: ChainInput) -> ChainOutput:
        prompt = await self.build_prompt(input)
        response = await self.model.generate(prompt, self.config)
        message = response.text.strip()
        output = ChainOutput(
            text=message,
            raw=response.text,
            value=ChatResult(message=message),
            metadata=dict(input.metadata),
            processing_time_ms=response.processing_time_ms,
        )
        if self.memory is not None:
            await self.memory.save(input, output)
        return output

    async def stream_invoke(self, input: ChainInput) -> AsyncIterator[str]:
        prompt = await self.build_prompt(input)
        parts: list[str] = []
        chunks = stream_model(self.model, prompt, self.config)
        try:
            async for chunk in chunks:
                parts.append(chunk)
                yield chunk
        finally:
            await close_stream(chunks)

        # Only reached when the stream completed; cancelled streams persist nothing.
        accumulated = "".join(parts)
        if self.memory is not None:
            message = accumulated.strip()
            await self.memory.save(
                input,
                ChainOutput(text=message, raw=accumulated, value=ChatResult(message=message), metadata=dict(input.metadata)),
            )
        logger.debug("chat_stream_completed", extra={"extra_fields": {"chars": len(accumulated)}})

    async def run(self, text: str) -> ChatResult:
        return (await self.invoke(ChainInput(text=text))).value
