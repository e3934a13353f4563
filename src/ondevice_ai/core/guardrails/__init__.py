from .base import (
    Blocked,
    Guardrail,
    GuardrailResult,
    Modified,
    Passed,
    apply_input_guardrails,
    apply_output_guardrails,
)
from .builtin import ContentFilterGuardrail, InputLengthGuardrail, RedactionGuardrail
from .chain import GuardedChain

__all__ = [
    "Blocked",
    "ContentFilterGuardrail",
    "GuardedChain",
    "Guardrail",
    "GuardrailResult",
    "InputLengthGuardrail",
    "Modified",
    "Passed",
    "RedactionGuardrail",
    "apply_input_guardrails",
    "apply_output_guardrails",
]
