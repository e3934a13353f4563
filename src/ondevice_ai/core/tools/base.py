from __future__ import annotations

import inspect
from typing import Awaitable, Callable, Mapping, Protocol, Sequence, Union, runtime_checkable

from ondevice_ai.core.errors import ValidationError


@runtime_checkable
class Tool(Protocol):
    id: str
    description: str
    parameter_description: str

    async def execute(self, parameters: Mapping[str, str]) -> str: ...


ToolFunction = Callable[[Mapping[str, str]], Union[str, Awaitable[str]]]


class FunctionTool:
    def __init__(
        self,
        id: str,
        description: str,
        fn: ToolFunction,
        parameter_description: str = "query: the text to act on",
    ) -> None:
        self.id = id
        self.description = description
        self.parameter_description = parameter_description
        self.fn = fn

    async def execute(self, parameters: Mapping[str, str]) -> str:
        result = self.fn(parameters)
        if inspect.isawaitable(result):
            result = await result
        return str(result)


class LocalSearchTool:
    """Case-insensitive substring search over an in-memory document list."""

    id = "local_search"
    description = "Search local documents for a keyword or phrase"
    parameter_description = "query: the keyword or phrase to look for"

    def __init__(self, documents: Sequence[str], max_results: int = 3) -> None:
        self.documents = list(documents)
        self.max_results = max_results

    async def execute(self, parameters: Mapping[str, str]) -> str:
        query = (parameters.get("query") or "").strip()
        if not query:
            raise ValidationError("local_search requires a 'query' parameter")
        needle = query.lower()
        matches = [doc for doc in self.documents if needle in doc.lower()][: self.max_results]
        if not matches:
            return f"No results found for '{query}'"
        return "\n".join(f"- {doc}" for doc in matches)
