from __future__ import annotations

import logging
import time
from typing import Any, Generic, Mapping, Sequence, TypeVar

from ondevice_ai.core.chains.combinators import BranchResult, ParallelPolicy
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
from ondevice_ai.core.errors import PipelineTypeError, ValidationError
from ondevice_ai.core.memory.base import Memory
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.schemas import ChainInput, ChainOutput

from . import steps as step_factories
from .steps import PipelineStep

logger = logging.getLogger("ondevice_ai.pipeline")

OutT = TypeVar("OutT")
T = TypeVar("T")


def _type_name(tp: type) -> str:
    return getattr(tp, "__name__", repr(tp))


class Pipeline(Generic[OutT]):
    """Ordered, type-checked sequence of chain recipes.

    Each fluent method returns a new pipeline; wiring a step whose ``accepts``
    does not match the previous step's ``output_type`` raises
    ``PipelineTypeError`` immediately. Models are bound only in ``run``.
    """

    def __init__(self, model: LanguageModel | None = None, steps: Sequence[PipelineStep[Any]] = ()) -> None:
        self.model = model
        self.steps: tuple[PipelineStep[Any], ...] = ()
        for step in steps:
            self._check(self.output_type, step)
            self.steps = self.steps + (step,)

    @property
    def output_type(self) -> type:
        return self.steps[-1].output_type if self.steps else str

    @staticmethod
    def _check(previous: type, step: PipelineStep[Any]) -> None:
        if not step.accepts_type(previous):
            raise PipelineTypeError(
                f"Step '{step.name}' expects {_type_name(step.accepts)} but previous step produces {_type_name(previous)}"
            )

    def then(self, step: PipelineStep[T]) -> Pipeline[T]:
        self._check(self.output_type, step)
        pipeline: Pipeline[T] = Pipeline(self.model)
        pipeline.steps = self.steps + (step,)
        return pipeline

    def summarize(self, bullet_count: int = 1, input_type: str = "text") -> Pipeline[SummarizeResult]:
        return self.then(step_factories.Summarize(bullet_count=bullet_count, input_type=input_type))

    def classify(self, categories: Sequence[str] = step_factories.DEFAULT_CATEGORIES, max_results: int = 3) -> Pipeline[ClassifyResult]:
        return self.then(step_factories.Classify(categories=categories, max_results=max_results))

    def extract(self, entity_types: Sequence[str] = step_factories.DEFAULT_ENTITY_TYPES) -> Pipeline[ExtractResult]:
        return self.then(step_factories.Extract(entity_types=entity_types))

    def chat(self, system_prompt: str = step_factories.DEFAULT_SYSTEM_PROMPT, memory: Memory | None = None) -> Pipeline[ChatResult]:
        return self.then(step_factories.Chat(system_prompt=system_prompt, memory=memory))

    def translate(self, target_language: str, source_language: str = "en") -> Pipeline[TranslateResult]:
        return self.then(step_factories.Translate(target_language=target_language, source_language=source_language))

    def rewrite(self, style: RewriteStyle | str) -> Pipeline[RewriteResult]:
        return self.then(step_factories.Rewrite(style))

    def proofread(self) -> Pipeline[ProofreadResult]:
        return self.then(step_factories.Proofread())

    def parallel(
        self, *steps: PipelineStep[Any], policy: ParallelPolicy = ParallelPolicy.FAIL_FAST
    ) -> Pipeline[list[BranchResult]]:
        return self.then(step_factories.Parallel(*steps, policy=policy))

    async def invoke(
        self,
        text: str,
        metadata: Mapping[str, str] | None = None,
        model: LanguageModel | None = None,
    ) -> ChainOutput:
        """Run every step in declaration order and return the last ``ChainOutput``."""
        if not self.steps:
            raise ValidationError("Pipeline has no steps")
        bound = model or self.model
        if bound is None:
            raise ValidationError("Pipeline requires a model to run")

        start = time.perf_counter()
        output = await self._run_step(0, bound, ChainInput(text=text, metadata=dict(metadata or {})))
        for index in range(1, len(self.steps)):
            output = await self._run_step(index, bound, output.as_input())
        logger.info(
            "pipeline_completed",
            extra={
                "extra_fields": {
                    "steps": [step.name for step in self.steps],
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                }
            },
        )
        return output

    async def _run_step(self, index: int, model: LanguageModel, input: ChainInput) -> ChainOutput:
        step = self.steps[index]
        chain = step.build_chain(model)
        output = await chain.invoke(input)
        logger.debug(
            "pipeline_step_completed",
            extra={"extra_fields": {"step": step.name, "index": index, "chain": chain.name}},
        )
        return output

    async def run(
        self,
        text: str,
        metadata: Mapping[str, str] | None = None,
        model: LanguageModel | None = None,
    ) -> OutT:
        output = await self.invoke(text, metadata=metadata, model=model)
        value = output.value if output.value is not None else output.text
        expected = self.output_type
        if not isinstance(value, expected):
            raise PipelineTypeError(
                f"Step '{self.steps[-1].name}' declared {_type_name(expected)} but produced {_type_name(type(value))}"
            )
        return value

    def __len__(self) -> int:
        return len(self.steps)
