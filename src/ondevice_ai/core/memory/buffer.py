from __future__ import annotations

from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.schemas import ChainInput, ChainOutput, MemoryEntry, MemoryRole

from .base import estimate_tokens


class BufferMemory:
    """Keep turns verbatim, evicting the oldest entries first once over a cap.

    ``max_entries`` counts entries (each saved turn adds a user and an
    assistant entry). ``max_tokens`` trims further but never below the latest
    exchange.
    """

    def __init__(self, max_entries: int | None = None, max_tokens: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValidationError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.max_tokens = max_tokens
        self._entries: list[MemoryEntry] = []

    async def load(self, input: ChainInput | None = None) -> list[MemoryEntry]:
        return list(self._entries)

    async def save(self, input: ChainInput, output: ChainOutput) -> None:
        self._entries.append(MemoryEntry(role=MemoryRole.USER, content=input.text))
        self._entries.append(MemoryEntry(role=MemoryRole.ASSISTANT, content=output.text))
        self._evict()

    async def clear(self) -> None:
        self._entries.clear()

    @property
    def estimated_token_count(self) -> int:
        return estimate_tokens(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _evict(self) -> None:
        if self.max_entries is not None and len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]
        if self.max_tokens is not None:
            while len(self._entries) > 2 and self.estimated_token_count > self.max_tokens:
                self._entries.pop(0)
