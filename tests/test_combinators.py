from __future__ import annotations

import asyncio

import pytest

from ondevice_ai.core.chains import (
    PARALLEL_SEPARATOR,
    ConditionalChain,
    FunctionChain,
    ModelChain,
    ParallelChain,
    ParallelPolicy,
    SequentialChain,
)
from ondevice_ai.core.errors import ModelError, ValidationError
from ondevice_ai.core.parsers import ListOutputParser
from ondevice_ai.core.prompts import PromptTemplate
from ondevice_ai.core.schemas import ChainInput
from ondevice_ai.testing import ScriptedModel


def _upper(text: str) -> str:
    return text.upper()


async def _exclaim(text: str) -> str:
    return text + "!"


def _failing(text: str) -> str:
    raise ModelError("boom")


def test_sequential_feeds_each_output_into_next_chain() -> None:
    a = FunctionChain("upper", _upper)
    b = FunctionChain("exclaim", _exclaim)
    x = ChainInput(text="hello", metadata={"lang": "en"})

    composed = asyncio.run(SequentialChain([a, b]).invoke(x))

    async def manual():
        return await b.invoke((await a.invoke(x)).as_input())

    expected = asyncio.run(manual())
    assert composed.text == expected.text == "HELLO!"
    assert composed.metadata == {"lang": "en"}


def test_sequential_stops_at_first_failure() -> None:
    calls: list[str] = []

    def record(text: str) -> str:
        calls.append(text)
        return text

    chain = SequentialChain([FunctionChain("fail", _failing), FunctionChain("record", record)])

    with pytest.raises(ModelError):
        asyncio.run(chain.invoke(ChainInput(text="x")))
    assert calls == []


def test_empty_combinators_are_rejected() -> None:
    with pytest.raises(ValidationError):
        SequentialChain([])
    with pytest.raises(ValidationError):
        ParallelChain([])
    with pytest.raises(ValidationError):
        ConditionalChain(lambda _: "a", {})


def test_parallel_preserves_input_order_regardless_of_completion() -> None:
    async def slow(text: str) -> str:
        await asyncio.sleep(0.05)
        return "slow:" + text

    async def fast(text: str) -> str:
        return "fast:" + text

    chain = ParallelChain([FunctionChain("slow", slow), FunctionChain("fast", fast)])

    output = asyncio.run(chain.invoke(ChainInput(text="x")))

    results = output.value
    assert len(results) == 2
    assert [r.chain_name for r in results] == ["slow", "fast"]
    assert results[0].output.text == "slow:x"
    assert results[1].output.text == "fast:x"
    assert output.text == "slow:x" + PARALLEL_SEPARATOR + "fast:x"


def test_parallel_fail_fast_raises_and_cancels_others() -> None:
    finished: list[str] = []

    async def slow(text: str) -> str:
        await asyncio.sleep(1)
        finished.append("slow")
        return text

    chain = ParallelChain([FunctionChain("slow", slow), FunctionChain("fail", _failing)])

    with pytest.raises(ModelError):
        asyncio.run(chain.invoke(ChainInput(text="x")))
    assert finished == []


def test_parallel_best_effort_tags_failed_branches() -> None:
    chain = ParallelChain(
        [FunctionChain("fail", _failing), FunctionChain("upper", _upper)],
        policy=ParallelPolicy.BEST_EFFORT,
    )

    output = asyncio.run(chain.invoke(ChainInput(text="x")))

    failed, ok = output.value
    assert not failed.ok
    assert failed.error == "boom"
    assert failed.error_type == "ModelError"
    assert ok.ok and ok.output.text == "X"
    assert output.text == "X"


def test_conditional_runs_exactly_one_branch() -> None:
    calls: list[str] = []

    def branch(name: str) -> FunctionChain:
        def run(text: str) -> str:
            calls.append(name)
            return f"{name}:{text}"

        return FunctionChain(name, run)

    async def route(input: ChainInput) -> str:
        return "question" if input.text.endswith("?") else "statement"

    chain = ConditionalChain(route, {"question": branch("q"), "statement": branch("s")})

    output = asyncio.run(chain.invoke(ChainInput(text="why?")))

    assert output.text == "q:why?"
    assert calls == ["q"]


def test_conditional_default_and_missing_branch() -> None:
    default = FunctionChain("default", _upper)
    with_default = ConditionalChain(lambda _: "nope", {"a": FunctionChain("a", _exclaim)}, default=default)

    assert asyncio.run(with_default.invoke(ChainInput(text="x"))).text == "X"

    without_default = ConditionalChain(lambda _: "nope", {"a": FunctionChain("a", _exclaim)})
    with pytest.raises(ValidationError):
        asyncio.run(without_default.invoke(ChainInput(text="x")))


def test_model_chain_formats_template_with_metadata_and_parses() -> None:
    model = ScriptedModel(["apples\nbananas\n"])
    chain = ModelChain(
        model,
        template=PromptTemplate("List {count} fruits about {text}"),
        parser=ListOutputParser(),
    )

    output = asyncio.run(chain.invoke(ChainInput(text="summer", metadata={"count": "2"})))

    assert output.value == ["apples", "bananas"]
    assert model.prompts[0].startswith("List 2 fruits about summer")


def test_model_chain_stream_closes_model_stream_on_early_exit() -> None:
    model = ScriptedModel([["a", "b", "c"]])
    chain = ModelChain(model)

    async def take_first() -> str:
        stream = chain.stream_invoke(ChainInput(text="go"))
        first = await stream.__anext__()
        await stream.aclose()
        return first

    assert asyncio.run(take_first()) == "a"
    assert model.chunks_yielded == 1
    assert model.streams_closed == 1


def test_sequential_with_one_chain_returns_its_output() -> None:
    output = asyncio.run(SequentialChain([FunctionChain("upper", _upper)]).invoke(ChainInput(text="solo")))

    assert output.text == "SOLO"
