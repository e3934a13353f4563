from __future__ import annotations

import time
from enum import Enum
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class ChainInput(_Frozen):
    text: str
    metadata: dict[str, str] = Field(default_factory=dict)


class ChainOutput(_Frozen):
    """Result of one chain invocation.

    ``text`` is display ready; ``raw`` is the model text before any guardrail
    or post-processing; ``value`` holds the typed result of built-in chains.
    """

    text: str
    raw: str = ""
    value: Any = None
    metadata: dict[str, str] = Field(default_factory=dict)
    processing_time_ms: int | None = None

    def as_input(self) -> ChainInput:
        return ChainInput(text=self.text, metadata=dict(self.metadata))

    def typed(self, cls: type[T]) -> T | None:
        return self.value if isinstance(self.value, cls) else None


class GenerationConfig(_Frozen):
    temperature: float | None = None
    top_k: int | None = None
    max_tokens: int | None = None

    STRUCTURED: ClassVar[GenerationConfig]
    CREATIVE: ClassVar[GenerationConfig]
    CONVERSATIONAL: ClassVar[GenerationConfig]


GenerationConfig.STRUCTURED = GenerationConfig(temperature=0.2, top_k=16)
GenerationConfig.CREATIVE = GenerationConfig(temperature=0.8, top_k=40)
GenerationConfig.CONVERSATIONAL = GenerationConfig(temperature=0.7, top_k=40)


class TokenUsage(_Frozen):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class ModelResponse(_Frozen):
    text: str
    processing_time_ms: int | None = None
    token_usage: TokenUsage | None = None


class MemoryRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class MemoryEntry(_Frozen):
    role: MemoryRole
    content: str
    timestamp: float = Field(default_factory=time.time)


class ChainExecutionRecord(_Frozen):
    chain_name: str
    input: str
    output: str | None = None
    processing_time_ms: int
    success: bool
    attempt: int
    timestamp: str
    error: str | None = None


class AgentStep(_Frozen):
    thought: str
    action: str
    input: str
    observation: str | None = None


class AgentResult(_Frozen):
    answer: str
    steps: tuple[AgentStep, ...] = ()
    total_steps: int
