from __future__ import annotations

from ondevice_ai.core.errors import ValidationError

from .base import Tool


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        if not tool.id:
            raise ValidationError("Tool id must not be empty")
        self._tools[tool.id] = tool

    def get(self, id: str) -> Tool | None:
        return self._tools.get(id)

    def ids(self) -> list[str]:
        return sorted(self._tools.keys())

    def describe(self) -> str:
        lines = []
        for id in self.ids():
            tool = self._tools[id]
            lines.append(f"- {tool.id}: {tool.description} (Input: {tool.parameter_description})")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, id: object) -> bool:
        return id in self._tools
