from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ondevice_ai.core.chains.base import Chain
from ondevice_ai.core.chains.builtin import (
    ChatChain,
    ClassifyChain,
    ExtractChain,
    ProofreadChain,
    RewriteChain,
    SummarizeChain,
    TranslateChain,
)
from ondevice_ai.core.chains.builtin.chat import DEFAULT_SYSTEM_PROMPT
from ondevice_ai.core.chains.builtin.classify import DEFAULT_CATEGORIES
from ondevice_ai.core.chains.builtin.extract import DEFAULT_ENTITY_TYPES
from ondevice_ai.core.chains.results import (
    ChatResult,
    ClassifyResult,
    ExtractResult,
    ProofreadResult,
    RewriteResult,
    RewriteStyle,
    SummarizeResult,
    TranslateResult,
)
from ondevice_ai.core.config import MemoryKind, Settings, load_settings
from ondevice_ai.core.guardrails.base import Guardrail
from ondevice_ai.core.logging.setup import configure_logging
from ondevice_ai.core.memory import BufferMemory, Memory, SummaryMemory
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.models.openai_compat import OpenAICompatModel
from ondevice_ai.core.orchestration import Agent, AgentConfig, ChainExecutor, Session
from ondevice_ai.core.pipeline import Pipeline
from ondevice_ai.core.tools.base import Tool


class OnDeviceAI:
    """Entry point binding one model to every built-in feature.

    The model is always explicit; ``from_settings`` is the one place that
    builds a default model, from configuration.
    """

    def __init__(self, model: LanguageModel, settings: Settings | None = None) -> None:
        self.model = model
        self.settings = settings or Settings()

    @classmethod
    def from_settings(cls, settings: Settings | None = None, path: str | Path | None = None) -> OnDeviceAI:
        settings = settings or load_settings(path)
        configure_logging(settings.logging)
        model = OpenAICompatModel(
            model=settings.model.model,
            url=settings.model.url,
            timeout_s=settings.model.timeout_s,
            max_context_tokens=settings.model.max_context_tokens,
        )
        return cls(model, settings=settings)

    async def summarize(self, text: str, bullet_count: int = 1, input_type: str = "text") -> SummarizeResult:
        return await SummarizeChain(self.model, bullet_count=bullet_count, input_type=input_type).run(text)

    async def classify(
        self, text: str, categories: Sequence[str] = DEFAULT_CATEGORIES, max_results: int = 3
    ) -> ClassifyResult:
        return await ClassifyChain(self.model, categories=categories, max_results=max_results).run(text)

    async def extract(self, text: str, entity_types: Sequence[str] = DEFAULT_ENTITY_TYPES) -> ExtractResult:
        return await ExtractChain(self.model, entity_types=entity_types).run(text)

    async def chat(
        self, message: str, memory: Memory | None = None, system_prompt: str = DEFAULT_SYSTEM_PROMPT
    ) -> ChatResult:
        return await ChatChain(self.model, memory=memory, system_prompt=system_prompt).run(message)

    async def translate(self, text: str, target_language: str, source_language: str = "en") -> TranslateResult:
        return await TranslateChain(self.model, target_language=target_language, source_language=source_language).run(text)

    async def rewrite(self, text: str, style: RewriteStyle | str) -> RewriteResult:
        return await RewriteChain(self.model, style=style).run(text)

    async def proofread(self, text: str) -> ProofreadResult:
        return await ProofreadChain(self.model).run(text)

    def pipeline(self) -> Pipeline[str]:
        return Pipeline(self.model)

    def memory(self) -> Memory:
        """A fresh memory configured by ``settings.memory``."""
        cfg = self.settings.memory
        if cfg.kind is MemoryKind.SUMMARY:
            return SummaryMemory(self.model, max_recent_entries=cfg.max_recent_entries)
        return BufferMemory(max_entries=cfg.max_entries)

    def session(
        self,
        memory: Memory | None = None,
        guardrails: Sequence[Guardrail] = (),
        system_prompt: str | None = None,
    ) -> Session:
        return Session(
            self.model,
            memory=memory if memory is not None else self.memory(),
            guardrails=guardrails,
            system_prompt=system_prompt,
        )

    def agent(
        self,
        tools: Sequence[Tool] = (),
        chains: Sequence[Chain] = (),
        max_steps: int | None = None,
        system_prompt: str | None = None,
        memory: Memory | None = None,
    ) -> Agent:
        config = AgentConfig(
            max_steps=self.settings.agent.max_steps if max_steps is None else max_steps,
            tools=tuple(tools),
            chains=tuple(chains),
            system_prompt=system_prompt,
        )
        return Agent(self.model, config=config, memory=memory)

    def executor(self, max_retries: int | None = None, retry_delay_s: float | None = None) -> ChainExecutor:
        cfg = self.settings.executor
        return ChainExecutor(
            max_retries=cfg.max_retries if max_retries is None else max_retries,
            retry_delay_s=cfg.retry_delay_s if retry_delay_s is None else retry_delay_s,
        )
