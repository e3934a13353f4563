from __future__ import annotations

import re
from difflib import SequenceMatcher
from typing import AsyncIterator

from ondevice_ai.core.chains.base import stream_model
from ondevice_ai.core.chains.results import ProofreadCorrection, ProofreadResult
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.prompts.builtin import PROOFREAD, strip_preamble
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig

_WORD_RE = re.compile(r"\S+")


class ProofreadChain:
    name = "ProofreadChain"

    def __init__(self, model: LanguageModel, config: GenerationConfig | None = None) -> None:
        self.model = model
        self.config = config or GenerationConfig.STRUCTURED

    def build_prompt(self, input: ChainInput) -> str:
        return PROOFREAD.format({"text": input.text})

    async def invoke(self, input: ChainInput) -> ChainOutput:
        response = await self.model.generate(self.build_prompt(input), self.config)
        corrected = strip_preamble(response.text) or input.text
        corrections = diff_corrections(input.text, corrected)
        result = ProofreadResult(
            corrected_text=corrected,
            corrections=corrections,
            has_corrections=corrected != input.text,
        )
        return ChainOutput(
            text=corrected,
            raw=response.text,
            value=result,
            metadata=dict(input.metadata),
            processing_time_ms=response.processing_time_ms,
        )

    def stream_invoke(self, input: ChainInput) -> AsyncIterator[str]:
        return stream_model(self.model, self.build_prompt(input), self.config)

    async def run(self, text: str) -> ProofreadResult:
        return (await self.invoke(ChainInput(text=text))).value


def diff_corrections(original: str, corrected: str) -> list[ProofreadCorrection]:
    """Word-level differences between ``original`` and ``corrected`` with character offsets."""
    source = list(_WORD_RE.finditer(original))
    target = list(_WORD_RE.finditer(corrected))
    matcher = SequenceMatcher(a=[m.group(0) for m in source], b=[m.group(0) for m in target], autojunk=False)

    corrections: list[ProofreadCorrection] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        before = " ".join(m.group(0) for m in source[i1:i2])
        after = " ".join(m.group(0) for m in target[j1:j2])
        start = source[i1].start() if i1 < i2 else None
        end = source[i2 - 1].end() if i1 < i2 else None
        corrections.append(ProofreadCorrection(original=before, corrected=after, start_pos=start, end_pos=end))
    return corrections
