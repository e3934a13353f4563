from __future__ import annotations

from typing import Sequence

from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.logging.redact import redact_personal

from .base import PASSED, Blocked, GuardrailResult, Modified


class InputLengthGuardrail:
    """Cap input length, truncating by default or blocking when ``truncate`` is off."""

    name = "InputLengthGuardrail"

    def __init__(self, max_characters: int = 16000, truncate: bool = True) -> None:
        if max_characters < 1:
            raise ValidationError("max_characters must be at least 1")
        self.max_characters = max_characters
        self.truncate = truncate

    async def check_input(self, text: str) -> GuardrailResult:
        if len(text) <= self.max_characters:
            return PASSED
        if self.truncate:
            return Modified(
                new_text=text[: self.max_characters],
                reason=f"Input truncated from {len(text)} to {self.max_characters} characters",
            )
        return Blocked(reason=f"Input exceeds maximum length of {self.max_characters} characters ({len(text)})")

    async def check_output(self, text: str) -> GuardrailResult:
        return PASSED


class ContentFilterGuardrail:
    """Block text containing any blocked pattern unless an allowed pattern also matches."""

    name = "ContentFilterGuardrail"

    def __init__(self, blocked_patterns: Sequence[str], allowed_patterns: Sequence[str] = ()) -> None:
        self.blocked_patterns = [pattern.lower() for pattern in blocked_patterns if pattern]
        self.allowed_patterns = [pattern.lower() for pattern in allowed_patterns if pattern]

    def _check(self, text: str, stage: str) -> GuardrailResult:
        lowered = text.lower()
        if any(pattern in lowered for pattern in self.allowed_patterns):
            return PASSED
        for pattern in self.blocked_patterns:
            if pattern in lowered:
                return Blocked(reason=f"{stage.capitalize()} contains blocked content: '{pattern}'")
        return PASSED

    async def check_input(self, text: str) -> GuardrailResult:
        return self._check(text, "input")

    async def check_output(self, text: str) -> GuardrailResult:
        return self._check(text, "output")


class RedactionGuardrail:
    """Mask e-mail addresses, phone numbers and secrets in both directions."""

    name = "RedactionGuardrail"

    def __init__(self, mask: str = "***") -> None:
        self.mask = mask

    def _check(self, text: str) -> GuardrailResult:
        redacted, count = redact_personal(text, mask=self.mask)
        if redacted == text:
            return PASSED
        return Modified(new_text=redacted, reason=f"Redacted {count} sensitive span(s)")

    async def check_input(self, text: str) -> GuardrailResult:
        return self._check(text)

    async def check_output(self, text: str) -> GuardrailResult:
        return self._check(text)
