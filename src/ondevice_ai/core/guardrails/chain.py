from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Sequence

from pydantic import BaseModel

from ondevice_ai.core.chains.base import Chain
from ondevice_ai.core.schemas import ChainInput, ChainOutput

from .base import Guardrail, apply_input_guardrails, apply_output_guardrails


class GuardedChain:
    """Wrap a chain with input and output guardrails.

    ``raw`` of the result keeps the inner chain's model text; ``text`` is the
    guardrail-approved version. Every string inside ``value`` goes through the
    output guardrails too, so typed results carry the same approved text.
    """

    def __init__(self, chain: Chain, guardrails: Sequence[Guardrail], name: str | None = None) -> None:
        self.chain = chain
        self.guardrails = list(guardrails)
        self.name = name or f"Guarded({chain.name})"

    async def invoke(self, input: ChainInput) -> ChainOutput:
        checked = await apply_input_guardrails(self.guardrails, input.text)
        output = await self.chain.invoke(ChainInput(text=checked, metadata=dict(input.metadata)))
        final = await apply_output_guardrails(self.guardrails, output.text)
        # Strings already checked once are not sent through the guardrails again.
        checked_strings = {output.text: final}
        value = await self._guard_value(output.value, checked_strings)
        if final == output.text and value is output.value:
            return output
        update: dict[str, Any] = {"text": final, "value": value}
        if final != output.text:
            update["raw"] = output.raw or output.text
        return output.model_copy(update=update)

    async def _guard_value(self, value: Any, checked: dict[str, str]) -> Any:
        """Return ``value`` with its strings guarded, or ``value`` itself when nothing changed."""
        if isinstance(value, Enum):
            return value
        if isinstance(value, str):
            if value not in checked:
                checked[value] = await apply_output_guardrails(self.guardrails, value)
            guarded = checked[value]
            return value if guarded == value else guarded
        if isinstance(value, BaseModel):
            changes = await self._guard_fields(value, type(value).model_fields, checked)
            return value.model_copy(update=changes) if changes else value
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            names = [field.name for field in dataclasses.fields(value)]
            changes = await self._guard_fields(value, names, checked)
            return dataclasses.replace(value, **changes) if changes else value
        if isinstance(value, (list, tuple)):
            items = [await self._guard_value(item, checked) for item in value]
            if all(new is old for new, old in zip(items, value)):
                return value
            return type(value)(items)
        if isinstance(value, dict):
            guarded = {key: await self._guard_value(item, checked) for key, item in value.items()}
            if all(guarded[key] is item for key, item in value.items()):
                return value
            return guarded
        return value

    async def _guard_fields(self, value: Any, names: Any, checked: dict[str, str]) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for name in names:
            current = getattr(value, name)
            guarded = await self._guard_value(current, checked)
            if guarded is not current:
                changes[name] = guarded
        return changes
