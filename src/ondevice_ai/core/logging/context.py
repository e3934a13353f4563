from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator

session_id_var: ContextVar[str | None] = ContextVar("session_id", default=None)
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
chain_name_var: ContextVar[str | None] = ContextVar("chain_name", default=None)
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "session_id": session_id_var,
    "run_id": run_id_var,
    "chain_name": chain_name_var,
    "correlation_id": correlation_id_var,
}


def set_context(**kwargs: str | None) -> dict[str, Token[str | None]]:
    tokens: dict[str, Token[str | None]] = {}
    for key, value in kwargs.items():
        var = _CONTEXT_VARS.get(key)
        if var is None:
            continue
        tokens[key] = var.set(value)
    return tokens


def reset_context(tokens: dict[str, Token[str | None]]) -> None:
    for key, token in tokens.items():
        var = _CONTEXT_VARS.get(key)
        if var is not None:
            var.reset(token)


@contextmanager
def log_context(
    session_id: str | None = None,
    run_id: str | None = None,
    chain_name: str | None = None,
    correlation_id: str | None = None,
) -> Iterator[None]:
    """Tag log records emitted inside the block; ``None`` leaves a value untouched."""
    values = {
        "session_id": session_id,
        "run_id": run_id,
        "chain_name": chain_name,
        "correlation_id": correlation_id,
    }
    tokens = set_context(**{key: value for key, value in values.items() if value is not None})
    try:
        yield
    finally:
        reset_context(tokens)


def get_log_context() -> dict[str, str]:
    values = {key: var.get() for key, var in _CONTEXT_VARS.items()}
    return {key: value for key, value in values.items() if value is not None}
