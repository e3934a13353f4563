from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone

from ondevice_ai.core.chains.base import Chain
from ondevice_ai.core.errors import RetryExhausted, ValidationError
from ondevice_ai.core.logging.context import log_context
from ondevice_ai.core.schemas import ChainExecutionRecord, ChainInput, ChainOutput

logger = logging.getLogger("ondevice_ai.executor")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ChainExecutor:
    """Run chains with timing, bounded retry and an append-only history.

    ``max_retries`` counts additional attempts after the first. One record is
    kept per terminal outcome, with ``attempt`` set to the attempts consumed.
    After the last failed attempt the original error is re-raised, or wrapped
    in ``RetryExhausted`` when ``wrap_exhausted`` is set.
    """

    def __init__(self, max_retries: int = 1, retry_delay_s: float = 0.1, wrap_exhausted: bool = False) -> None:
        if max_retries < 0:
            raise ValidationError("max_retries must not be negative")
        if retry_delay_s < 0:
            raise ValidationError("retry_delay_s must not be negative")
        self.max_retries = max_retries
        self.retry_delay_s = retry_delay_s
        self.wrap_exhausted = wrap_exhausted
        self._history: list[ChainExecutionRecord] = []

    async def execute(self, chain: Chain, input: ChainInput) -> ChainOutput:
        max_attempts = self.max_retries + 1
        start = time.perf_counter()
        started_at = _now_iso()
        with log_context(chain_name=chain.name):
            attempt = 1
            while True:
                try:
                    output = await chain.invoke(input)
                except Exception as exc:
                    if attempt < max_attempts:
                        logger.warning(
                            "chain_retry",
                            extra={"extra_fields": {"attempt": attempt, "max_attempts": max_attempts, "error": str(exc)}},
                        )
                        await asyncio.sleep(self.retry_delay_s)
                        attempt += 1
                        continue
                    self._record(chain, input, None, start, started_at, attempt, exc)
                    if self.wrap_exhausted:
                        raise RetryExhausted(chain.name, attempt, exc) from exc
                    raise
                self._record(chain, input, output, start, started_at, attempt, None)
                return output

    def _record(
        self,
        chain: Chain,
        input: ChainInput,
        output: ChainOutput | None,
        start: float,
        started_at: str,
        attempt: int,
        error: BaseException | None,
    ) -> None:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        record = ChainExecutionRecord(
            chain_name=chain.name,
            input=input.text,
            output=output.text if output is not None else None,
            processing_time_ms=elapsed_ms,
            success=error is None,
            attempt=attempt,
            timestamp=started_at,
            error=str(error) if error is not None else None,
        )
        self._history.append(record)
        logger.info(
            "chain_executed",
            extra={
                "extra_fields": {
                    "success": record.success,
                    "attempt": attempt,
                    "processing_time_ms": elapsed_ms,
                    "error_type": error.__class__.__name__ if error is not None else None,
                }
            },
        )

    def get_history(self) -> list[ChainExecutionRecord]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
