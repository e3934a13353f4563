from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ondevice_ai.core.schemas import ChainInput, ChainOutput, MemoryEntry


@runtime_checkable
class Memory(Protocol):
    async def load(self, input: ChainInput | None = None) -> list[MemoryEntry]: ...

    async def save(self, input: ChainInput, output: ChainOutput) -> None: ...

    async def clear(self) -> None: ...

    @property
    def estimated_token_count(self) -> int: ...


def estimate_tokens(entries: Sequence[MemoryEntry]) -> int:
    # Roughly four characters per token for English text.
    return sum(len(entry.content) // 4 for entry in entries)


def format_history(entries: Sequence[MemoryEntry]) -> str:
    return "\n".join(f"{entry.role.value.capitalize()}: {entry.content}" for entry in entries)
