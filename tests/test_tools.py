from __future__ import annotations

import asyncio

import pytest

from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.tools import FunctionTool, LocalSearchTool, Tool, ToolRegistry


def test_tool_registry_registers_and_fetches() -> None:
    registry = ToolRegistry()
    registry.register(LocalSearchTool(["Python is a language", "Rust is a language"]))
    registry.register(FunctionTool("clock", "Current time", lambda parameters: "12:00"))

    assert registry.ids() == ["clock", "local_search"]
    assert "local_search" in registry
    assert registry.get("missing") is None
    assert "- clock: Current time" in registry.describe()


def test_local_search_is_case_insensitive() -> None:
    tool = LocalSearchTool(["Python is a language", "Snakes are reptiles"])

    assert asyncio.run(tool.execute({"query": "PYTHON"})) == "- Python is a language"
    assert "No results" in asyncio.run(tool.execute({"query": "java"}))

    with pytest.raises(ValidationError):
        asyncio.run(tool.execute({}))


def test_function_tool_accepts_async_callables() -> None:
    async def lookup(parameters) -> str:
        return parameters["query"][::-1]

    tool = FunctionTool("reverse", "Reverse text", lookup)

    assert isinstance(tool, Tool)
    assert asyncio.run(tool.execute({"query": "abc"})) == "cba"


def test_registry_rejects_empty_id() -> None:
    with pytest.raises(ValidationError):
        ToolRegistry().register(FunctionTool("", "nothing", lambda parameters: ""))
