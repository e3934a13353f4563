from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Protocol, Union, runtime_checkable

from ondevice_ai.core.errors import GuardrailBlocked

logger = logging.getLogger("ondevice_ai.guardrails")


@dataclass(frozen=True)
class Passed:
    pass


@dataclass(frozen=True)
class Blocked:
    reason: str


@dataclass(frozen=True)
class Modified:
    new_text: str
    reason: str = ""


GuardrailResult = Union[Passed, Blocked, Modified]

PASSED = Passed()


@runtime_checkable
class Guardrail(Protocol):
    name: str

    async def check_input(self, text: str) -> GuardrailResult: ...

    async def check_output(self, text: str) -> GuardrailResult: ...


async def _apply(guardrails: Iterable[Guardrail], text: str, stage: str) -> str:
    working = text
    for guardrail in guardrails:
        if stage == "input":
            result = await guardrail.check_input(working)
        else:
            result = await guardrail.check_output(working)

        if isinstance(result, Blocked):
            logger.warning(
                "guardrail_blocked",
                extra={"extra_fields": {"guardrail": guardrail.name, "stage": stage, "reason": result.reason}},
            )
            raise GuardrailBlocked(result.reason, guardrail=guardrail.name, stage=stage)
        if isinstance(result, Modified):
            logger.info(
                "guardrail_modified",
                extra={
                    "extra_fields": {
                        "guardrail": guardrail.name,
                        "stage": stage,
                        "reason": result.reason,
                        "chars_before": len(working),
                        "chars_after": len(result.new_text),
                    }
                },
            )
            working = result.new_text
    return working


async def apply_input_guardrails(guardrails: Iterable[Guardrail], text: str) -> str:
    """Run input checks in order; the working text flows from one guardrail to the next.

    Raises ``GuardrailBlocked`` at the first ``Blocked`` result.
    """
    return await _apply(guardrails, text, "input")


async def apply_output_guardrails(guardrails: Iterable[Guardrail], text: str) -> str:
    return await _apply(guardrails, text, "output")
