from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Mapping, Sequence, Union

from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.schemas import ChainInput, ChainOutput

from .base import Chain

logger = logging.getLogger("ondevice_ai.chains")

PARALLEL_SEPARATOR = "\n---\n"


class SequentialChain:
    """Run chains left to right, feeding each output's text to the next chain."""

    def __init__(self, chains: Sequence[Chain], name: str = "SequentialChain") -> None:
        if not chains:
            raise ValidationError("SequentialChain requires at least one chain")
        self.chains = list(chains)
        self.name = name

    async def invoke(self, input: ChainInput) -> ChainOutput:
        output = await self.chains[0].invoke(input)
        for chain in self.chains[1:]:
            output = await chain.invoke(output.as_input())
        return output


class ParallelPolicy(str, Enum):
    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


@dataclass(frozen=True)
class BranchResult:
    index: int
    chain_name: str
    output: ChainOutput | None = None
    error: str | None = None
    error_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.output is not None


class ParallelChain:
    """Run chains concurrently on the same input.

    ``value`` of the returned output is a list of ``BranchResult`` in the order
    the chains were given, regardless of completion order.
    """

    def __init__(
        self,
        chains: Sequence[Chain],
        policy: ParallelPolicy = ParallelPolicy.FAIL_FAST,
        name: str = "ParallelChain",
    ) -> None:
        if not chains:
            raise ValidationError("ParallelChain requires at least one chain")
        self.chains = list(chains)
        self.policy = ParallelPolicy(policy)
        self.name = name

    async def gather(self, input: ChainInput) -> list[BranchResult]:
        tasks = [asyncio.ensure_future(chain.invoke(input)) for chain in self.chains]
        if self.policy is ParallelPolicy.FAIL_FAST:
            try:
                outputs = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
            return [
                BranchResult(index=index, chain_name=chain.name, output=output)
                for index, (chain, output) in enumerate(zip(self.chains, outputs))
            ]

        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
        results: list[BranchResult] = []
        for index, (chain, outcome) in enumerate(zip(self.chains, outcomes)):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.warning(
                    "parallel_branch_failed",
                    extra={"extra_fields": {"chain": chain.name, "index": index, "error": str(outcome)}},
                )
                results.append(
                    BranchResult(
                        index=index,
                        chain_name=chain.name,
                        error=str(outcome),
                        error_type=outcome.__class__.__name__,
                    )
                )
            else:
                results.append(BranchResult(index=index, chain_name=chain.name, output=outcome))
        return results

    async def invoke(self, input: ChainInput) -> ChainOutput:
        results = await self.gather(input)
        succeeded = [result.output for result in results if result.output is not None]
        metadata = dict(input.metadata)
        for output in succeeded:
            metadata.update(output.metadata)
        text = PARALLEL_SEPARATOR.join(output.text for output in succeeded)
        return ChainOutput(
            text=text,
            raw=PARALLEL_SEPARATOR.join(output.raw for output in succeeded),
            value=results,
            metadata=metadata,
        )


Condition = Callable[[ChainInput], Union[str, Awaitable[str]]]


class ConditionalChain:
    """Pick exactly one branch chain by the key ``condition`` returns."""

    def __init__(
        self,
        condition: Condition,
        branches: Mapping[str, Chain],
        default: Chain | None = None,
        name: str = "ConditionalChain",
    ) -> None:
        if not branches and default is None:
            raise ValidationError("ConditionalChain requires at least one branch")
        self.condition = condition
        self.branches = dict(branches)
        self.default = default
        self.name = name

    async def select(self, input: ChainInput) -> Chain:
        key = self.condition(input)
        if inspect.isawaitable(key):
            key = await key
        chain = self.branches.get(key, self.default)
        if chain is None:
            raise ValidationError(f"No branch for key '{key}' in {self.name}")
        return chain

    async def invoke(self, input: ChainInput) -> ChainOutput:
        chain = await self.select(input)
        return await chain.invoke(input)
