from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar, overload

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
from ondevice_ai.core.chains.combinators import BranchResult, ParallelChain, ParallelPolicy
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
from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.memory.base import Memory
from ondevice_ai.core.models.base import LanguageModel

ChainFactory = Callable[[LanguageModel], Chain]

StepOutT = TypeVar("StepOutT")
T = TypeVar("T")


@dataclass(frozen=True)
class PipelineStep(Generic[StepOutT]):
    """One deferred chain recipe plus the result types it consumes and produces.

    ``accepts`` is the result type the previous step must produce; ``object``
    takes any text-bearing result, including the raw pipeline input.
    """

    name: str
    build_chain: ChainFactory
    output_type: type[StepOutT]
    accepts: type = object

    def accepts_type(self, previous: type) -> bool:
        return issubclass(previous, self.accepts)


@dataclass(frozen=True)
class ParallelStep(PipelineStep[list[BranchResult]]):
    steps: tuple[PipelineStep[Any], ...] = ()

    def accepts_type(self, previous: type) -> bool:
        return all(step.accepts_type(previous) for step in self.steps)


def Summarize(bullet_count: int = 1, input_type: str = "text") -> PipelineStep[SummarizeResult]:
    if bullet_count < 1:
        raise ValidationError("bullet_count must be at least 1")
    return PipelineStep(
        name="summarize",
        build_chain=lambda model: SummarizeChain(model, bullet_count=bullet_count, input_type=input_type),
        output_type=SummarizeResult,
    )


def Classify(categories: Sequence[str] = DEFAULT_CATEGORIES, max_results: int = 3) -> PipelineStep[ClassifyResult]:
    if not categories:
        raise ValidationError("ClassifyChain requires at least one category")
    categories = tuple(categories)
    return PipelineStep(
        name="classify",
        build_chain=lambda model: ClassifyChain(model, categories=categories, max_results=max_results),
        output_type=ClassifyResult,
    )


def Extract(entity_types: Sequence[str] = DEFAULT_ENTITY_TYPES) -> PipelineStep[ExtractResult]:
    if not entity_types:
        raise ValidationError("ExtractChain requires at least one entity type")
    entity_types = tuple(entity_types)
    return PipelineStep(
        name="extract",
        build_chain=lambda model: ExtractChain(model, entity_types=entity_types),
        output_type=ExtractResult,
    )


def Chat(system_prompt: str = DEFAULT_SYSTEM_PROMPT, memory: Memory | None = None) -> PipelineStep[ChatResult]:
    return PipelineStep(
        name="chat",
        build_chain=lambda model: ChatChain(model, memory=memory, system_prompt=system_prompt),
        output_type=ChatResult,
    )


def Translate(target_language: str, source_language: str = "en") -> PipelineStep[TranslateResult]:
    if not target_language:
        raise ValidationError("TranslateChain requires a target language")
    return PipelineStep(
        name="translate",
        build_chain=lambda model: TranslateChain(model, target_language=target_language, source_language=source_language),
        output_type=TranslateResult,
    )


def Rewrite(style: RewriteStyle | str) -> PipelineStep[RewriteResult]:
    style = RewriteStyle(style)
    return PipelineStep(
        name="rewrite",
        build_chain=lambda model: RewriteChain(model, style=style),
        output_type=RewriteResult,
    )


def Proofread() -> PipelineStep[ProofreadResult]:
    return PipelineStep(name="proofread", build_chain=ProofreadChain, output_type=ProofreadResult)


def Parallel(*steps: PipelineStep[Any], policy: ParallelPolicy = ParallelPolicy.FAIL_FAST) -> ParallelStep:
    """Run several steps on the same text; the step result is a list of ``BranchResult``."""
    if not steps:
        raise ValidationError("Parallel requires at least one step")
    return ParallelStep(
        name="parallel(" + ",".join(step.name for step in steps) + ")",
        build_chain=lambda model: ParallelChain([step.build_chain(model) for step in steps], policy=policy),
        output_type=list,
        steps=tuple(steps),
    )


@overload
def Step(chain_factory: ChainFactory, *, accepts: type = ..., name: str | None = ...) -> PipelineStep[str]: ...


@overload
def Step(
    chain_factory: ChainFactory, output_type: type[T], accepts: type = ..., name: str | None = ...
) -> PipelineStep[T]: ...


def Step(chain_factory: ChainFactory, output_type: type[Any] = str, accepts: type = object, name: str | None = None) -> PipelineStep[Any]:
    """Wrap any chain factory as a step; ``output_type`` is checked against the chain's ``value`` at run time."""
    return PipelineStep(
        name=name or getattr(chain_factory, "__name__", "step"),
        build_chain=chain_factory,
        output_type=output_type,
        accepts=accepts,
    )
