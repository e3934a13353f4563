"""Deterministic in-memory model for tests and examples."""

from __future__ import annotations

from collections import deque
from typing import AsyncIterator, Callable, Iterable, Sequence, Union

from ondevice_ai.core.errors import ModelError
from ondevice_ai.core.schemas import GenerationConfig, ModelResponse, TokenUsage

# A scripted reply is text, an exception to raise, or explicit stream chunks
# (which may contain an exception to raise mid-stream).
Reply = Union[str, BaseException, Sequence[Union[str, BaseException]]]


class ScriptedModel:
    """Replays queued replies in order and records every prompt it receives.

    ``responder`` is consulted once the queue is empty; with neither left,
    calls fail with ``ModelError``.
    """

    def __init__(
        self,
        responses: Iterable[Reply] = (),
        responder: Callable[[str], str] | None = None,
        name: str = "scripted",
        max_context_tokens: int = 4096,
        is_ready: bool = True,
    ) -> None:
        self._queue: deque[Reply] = deque(responses)
        self.responder = responder
        self.name = name
        self.max_context_tokens = max_context_tokens
        self.is_ready = is_ready
        self.prompts: list[str] = []
        self.configs: list[GenerationConfig | None] = []
        self.chunks_yielded = 0
        self.streams_closed = 0

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    def queue(self, *replies: Reply) -> None:
        self._queue.extend(replies)

    def _next(self, prompt: str, config: GenerationConfig | None) -> Reply:
        self.prompts.append(prompt)
        self.configs.append(config)
        if not self.is_ready:
            raise ModelError(f"Model {self.name} is not ready")
        if self._queue:
            return self._queue.popleft()
        if self.responder is not None:
            return self.responder(prompt)
        raise ModelError(f"Model {self.name} has no scripted response left")

    async def generate(self, prompt: str, config: GenerationConfig | None = None) -> ModelResponse:
        reply = self._next(prompt, config)
        if isinstance(reply, BaseException):
            raise reply
        if not isinstance(reply, str):
            failures = [part for part in reply if isinstance(part, BaseException)]
            if failures:
                raise failures[0]
            reply = "".join(reply)
        return ModelResponse(
            text=reply,
            processing_time_ms=0,
            token_usage=TokenUsage(prompt_tokens=len(prompt) // 4, completion_tokens=len(reply) // 4),
        )

    async def stream(self, prompt: str, config: GenerationConfig | None = None) -> AsyncIterator[str]:
        reply = self._next(prompt, config)
        if isinstance(reply, BaseException):
            raise reply
        parts = _split_words(reply) if isinstance(reply, str) else list(reply)
        try:
            for part in parts:
                if isinstance(part, BaseException):
                    raise part
                self.chunks_yielded += 1
                yield part
        finally:
            self.streams_closed += 1


def _split_words(text: str) -> list[str]:
    words = text.split(" ")
    return [word + " " for word in words[:-1]] + [words[-1]] if words else []
