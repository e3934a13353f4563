from __future__ import annotations

import logging
import time
import uuid
from typing import Sequence

from ondevice_ai.core.chains.base import Chain
from ondevice_ai.core.guardrails.base import Guardrail, apply_input_guardrails, apply_output_guardrails
from ondevice_ai.core.logging.context import log_context
from ondevice_ai.core.memory.base import Memory, format_history
from ondevice_ai.core.memory.buffer import BufferMemory
from ondevice_ai.core.models.base import LanguageModel
from ondevice_ai.core.schemas import ChainInput, ChainOutput, GenerationConfig

logger = logging.getLogger("ondevice_ai.session")


class Session:
    """One conversation: a model, its own memory and an ordered guardrail list.

    ``send`` persists an exchange only after the response has passed every
    output guardrail, so a blocked, failed or cancelled turn leaves memory as
    it was.
    """

    def __init__(
        self,
        model: LanguageModel,
        memory: Memory | None = None,
        guardrails: Sequence[Guardrail] = (),
        system_prompt: str | None = None,
        config: GenerationConfig | None = None,
        session_id: str | None = None,
    ) -> None:
        self.model = model
        self.memory = memory if memory is not None else BufferMemory()
        self.guardrails = tuple(guardrails)
        self.system_prompt = system_prompt
        self.config = config or GenerationConfig.CONVERSATIONAL
        self.session_id = session_id or uuid.uuid4().hex

    async def build_prompt(self, message: str) -> str:
        lines: list[str] = []
        if self.system_prompt:
            lines.append(self.system_prompt)
            lines.append("")
        history = format_history(await self.memory.load(ChainInput(text=message)))
        if history:
            lines.append(history)
        lines.append(f"User: {message}")
        lines.append("Assistant:")
        return "\n".join(lines)

    async def send(self, message: str) -> str:
        with log_context(session_id=self.session_id):
            start = time.perf_counter()
            checked = await apply_input_guardrails(self.guardrails, message)
            prompt = await self.build_prompt(checked)
            response = await self.model.generate(prompt, self.config)
            reply = await apply_output_guardrails(self.guardrails, response.text.strip())
            await self.memory.save(ChainInput(text=checked), ChainOutput(text=reply, raw=response.text))
            logger.info(
                "session_send",
                extra={
                    "extra_fields": {
                        "input_chars": len(checked),
                        "output_chars": len(reply),
                        "duration_ms": int((time.perf_counter() - start) * 1000),
                    }
                },
            )
            return reply

    async def run(self, chain: Chain, input: ChainInput | str) -> ChainOutput:
        """Invoke ``chain`` directly. Guardrails and memory are not applied."""
        if isinstance(input, str):
            input = ChainInput(text=input)
        with log_context(session_id=self.session_id):
            return await chain.invoke(input)

    async def reset(self) -> None:
        await self.memory.clear()

    async def has_history(self) -> bool:
        return bool(await self.memory.load())
