from __future__ import annotations


class OnDeviceAIError(RuntimeError):
    """Base error for the orchestration runtime."""


class ValidationError(OnDeviceAIError):
    """Raised for invalid caller input: missing template variables, empty required lists."""


class PipelineTypeError(ValidationError):
    """Raised when pipeline steps are wired with incompatible result types."""


class OutputParseError(ValidationError):
    """Raised when model output cannot be parsed into the requested shape."""


class ModelError(OnDeviceAIError):
    """Raised when the model backend fails to generate or stream."""


class GuardrailBlocked(OnDeviceAIError):
    def __init__(self, reason: str, guardrail: str = "", stage: str = "input") -> None:
        prefix = f"Blocked {stage} by {guardrail}" if guardrail else f"Blocked {stage}"
        super().__init__(f"{prefix}: {reason}")
        self.reason = reason
        self.guardrail = guardrail
        self.stage = stage


class AgentActionUnresolved(OnDeviceAIError):
    """Non-fatal: the agent picked an action that names no tool or chain."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Unknown action: {action}")
        self.action = action


class RetryExhausted(OnDeviceAIError):
    def __init__(self, chain_name: str, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"Chain {chain_name} failed after {attempts} attempt(s): {last_error}")
        self.chain_name = chain_name
        self.attempts = attempts
        self.last_error = last_error
