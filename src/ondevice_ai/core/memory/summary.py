from __future__ import annotations

import asyncio
import logging

from ondevice_ai.core.errors import OnDeviceAIError, ValidationError
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.prompts.builtin import SUMMARIZE_MEMORY
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig, MemoryEntry, MemoryRole

from .base import estimate_tokens, format_history

logger = logging.getLogger("ondevice_ai.memory")

SUMMARY_PREFIX = "Previous conversation summary: "


class SummaryMemory:
    """Recent turns verbatim plus one running summary of everything older.

    Compaction is entry-count based: once more than ``max_recent_entries`` are
    held, the overflow is folded into the summary with one model call. The
    prompt carries the previous summary and only the newly compacted entries,
    and the result replaces the summary, so each compacted turn is reflected
    exactly once. When the model call fails nothing is evicted and compaction
    is retried on the next save.
    """

    def __init__(
        self,
        model: LanguageModel,
        max_recent_entries: int = 8,
        config: GenerationConfig | None = None,
    ) -> None:
        if max_recent_entries < 2:
            raise ValidationError("max_recent_entries must be at least 2")
        self.model = model
        self.max_recent_entries = max_recent_entries
        self.config = config or GenerationConfig.STRUCTURED
        self.summary = ""
        self.compacted_count = 0
        self._recent: list[MemoryEntry] = []
        self._lock = asyncio.Lock()

    async def load(self, input: ChainInput | None = None) -> list[MemoryEntry]:
        entries: list[MemoryEntry] = []
        if self.summary:
            entries.append(MemoryEntry(role=MemoryRole.SYSTEM, content=SUMMARY_PREFIX + self.summary, timestamp=0.0))
        entries.extend(self._recent)
        return entries

    async def save(self, input: ChainInput, output: ChainOutput) -> None:
        async with self._lock:
            self._recent.append(MemoryEntry(role=MemoryRole.USER, content=input.text))
            self._recent.append(MemoryEntry(role=MemoryRole.ASSISTANT, content=output.text))
            if len(self._recent) > self.max_recent_entries:
                await self._compact()

    async def clear(self) -> None:
        async with self._lock:
            self._recent.clear()
            self.summary = ""
            self.compacted_count = 0

    @property
    def estimated_token_count(self) -> int:
        return len(self.summary) // 4 + estimate_tokens(self._recent)

    async def _compact(self) -> None:
        overflow = len(self._recent) - self.max_recent_entries
        # Fold whole turns so a reply never outlives its question.
        overflow += overflow % 2
        to_fold = self._recent[:overflow]
        existing = f"Existing summary: {self.summary}\n\n" if self.summary else ""
        prompt = SUMMARIZE_MEMORY.format({"existing_summary": existing, "conversation": format_history(to_fold)})
        try:
            response = await self.model.generate(prompt, self.config)
        except OnDeviceAIError as exc:
            logger.warning(
                "memory_compaction_failed",
                extra={"extra_fields": {"pending": overflow, "error": str(exc)}},
            )
            return

        new_summary = response.text.strip()
        if not new_summary:
            logger.warning("memory_compaction_empty", extra={"extra_fields": {"pending": overflow}})
            return
        self.summary = new_summary
        del self._recent[:overflow]
        self.compacted_count += overflow
        logger.info(
            "memory_compacted",
            extra={"extra_fields": {"folded": overflow, "compacted_total": self.compacted_count}},
        )
