from __future__ import annotations

import asyncio

import pytest

from ondevice_ai.core.errors import ModelError, ValidationError
from ondevice_ai.core.memory import BufferMemory, SummaryMemory
from ondevice_ai.core.memory.summary import SUMMARY_PREFIX
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig, MemoryRole
from ondevice_ai.testing import ScriptedModel


async def _save_turns(memory, count: int, start: int = 1) -> None:
    for index in range(start, start + count):
        await memory.save(ChainInput(text=f"q{index}"), ChainOutput(text=f"a{index}"))


def test_buffer_memory_keeps_most_recent_entries_in_order() -> None:
    memory = BufferMemory(max_entries=4)

    asyncio.run(_save_turns(memory, 3))
    entries = asyncio.run(memory.load())

    assert [e.content for e in entries] == ["q2", "a2", "q3", "a3"]
    assert [e.role for e in entries] == [MemoryRole.USER, MemoryRole.ASSISTANT] * 2


def test_buffer_memory_cap_of_n_after_n_plus_one_saves() -> None:
    memory = BufferMemory(max_entries=3)

    asyncio.run(_save_turns(memory, 2))
    entries = asyncio.run(memory.load())

    assert [e.content for e in entries] == ["a1", "q2", "a2"]


def test_buffer_memory_token_budget_keeps_latest_exchange() -> None:
    memory = BufferMemory(max_tokens=1)

    asyncio.run(
        memory.save(ChainInput(text="x" * 40), ChainOutput(text="y" * 40))
    )
    asyncio.run(
        memory.save(ChainInput(text="z" * 40), ChainOutput(text="w" * 40))
    )

    entries = asyncio.run(memory.load())
    assert [e.content[0] for e in entries] == ["z", "w"]


def test_buffer_memory_load_returns_copy_and_clear_empties() -> None:
    memory = BufferMemory()
    asyncio.run(_save_turns(memory, 1))

    loaded = asyncio.run(memory.load())
    loaded.clear()
    assert len(memory) == 2
    assert memory.estimated_token_count == 0

    asyncio.run(memory.clear())
    assert asyncio.run(memory.load()) == []


def test_buffer_memory_rejects_non_positive_cap() -> None:
    with pytest.raises(ValidationError):
        BufferMemory(max_entries=0)


def test_summary_memory_folds_overflow_into_one_summary() -> None:
    model = ScriptedModel(["Sam asked two things."])
    memory = SummaryMemory(model, max_recent_entries=4)

    asyncio.run(_save_turns(memory, 3))
    entries = asyncio.run(memory.load())

    assert entries[0].role is MemoryRole.SYSTEM
    assert entries[0].content == SUMMARY_PREFIX + "Sam asked two things."
    assert [e.content for e in entries[1:]] == ["q2", "a2", "q3", "a3"]
    assert model.call_count == 1
    assert "User: q1\nAssistant: a1" in model.prompts[0]
    assert model.configs[0] == GenerationConfig.STRUCTURED
    assert memory.compacted_count == 2


def test_summary_memory_replaces_summary_with_only_new_entries_in_prompt() -> None:
    model = ScriptedModel(["first summary", "second summary"])
    memory = SummaryMemory(model, max_recent_entries=2)

    asyncio.run(_save_turns(memory, 3))

    entries = asyncio.run(memory.load())
    system_entries = [e for e in entries if e.role is MemoryRole.SYSTEM]
    assert len(system_entries) == 1
    assert system_entries[0].content.endswith("second summary")
    assert [e.content for e in entries[1:]] == ["q3", "a3"]

    second_prompt = model.prompts[1]
    assert "Existing summary: first summary" in second_prompt
    assert "q2" in second_prompt
    assert "q1" not in second_prompt


def test_summary_memory_keeps_entries_when_model_fails() -> None:
    model = ScriptedModel([ModelError("offline"), "recovered summary"])
    memory = SummaryMemory(model, max_recent_entries=2)

    asyncio.run(_save_turns(memory, 2))
    entries = asyncio.run(memory.load())
    assert [e.content for e in entries] == ["q1", "a1", "q2", "a2"]
    assert memory.summary == ""

    asyncio.run(_save_turns(memory, 1, start=3))
    entries = asyncio.run(memory.load())
    assert entries[0].content.endswith("recovered summary")
    assert [e.content for e in entries[1:]] == ["q3", "a3"]
    assert "q1" in model.prompts[1] and "q2" in model.prompts[1]


def test_summary_memory_clear_resets_summary() -> None:
    model = ScriptedModel(["summary"])
    memory = SummaryMemory(model, max_recent_entries=2)
    asyncio.run(_save_turns(memory, 2))

    asyncio.run(memory.clear())

    assert asyncio.run(memory.load()) == []
    assert memory.estimated_token_count == 0


def test_summary_memory_with_odd_window_folds_whole_turns() -> None:
    model = ScriptedModel(["first turn summary"])
    memory = SummaryMemory(model, max_recent_entries=3)

    asyncio.run(_save_turns(memory, 2))
    entries = asyncio.run(memory.load())

    assert entries[0].role is MemoryRole.SYSTEM
    assert [e.content for e in entries[1:]] == ["q2", "a2"]
    assert [e.role for e in entries[1:]] == [MemoryRole.USER, MemoryRole.ASSISTANT]
    assert "User: q1\nAssistant: a1" in model.prompts[0]
    assert memory.compacted_count == 2
