from __future__ import annotations

import json
import logging
import time
from typing import AsyncIterator

import httpx

from ondevice_ai.core.errors import ModelError
from ondevice_ai.core.schemas import GenerationConfig, ModelResponse, TokenUsage

logger = logging.getLogger("ondevice_ai.model")

_DEFAULT_URL = "http://127.0.0.1:8080/v1/chat/completions"


class OpenAICompatModel:
    """Model adapter for local OpenAI-compatible servers (llama.cpp, vLLM).

    Transport and status failures surface as ``ModelError``. No retries happen
    here; wrap chains in a ``ChainExecutor`` for that.
    """

    def __init__(
        self,
        model: str,
        url: str = _DEFAULT_URL,
        timeout_s: float = 45.0,
        max_context_tokens: int = 4096,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.model = model
        self.url = url
        self.timeout_s = timeout_s
        self.max_context_tokens = max_context_tokens
        self.name = f"openai-compat:{model}"
        self._client = client

    @property
    def is_ready(self) -> bool:
        return bool(self.url and self.model)

    def _payload(self, prompt: str, config: GenerationConfig | None, stream: bool) -> dict[str, object]:
        payload: dict[str, object] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if config is not None:
            if config.temperature is not None:
                payload["temperature"] = config.temperature
            if config.top_k is not None:
                payload["top_k"] = config.top_k
            if config.max_tokens is not None:
                payload["max_tokens"] = config.max_tokens
        if stream:
            payload["stream"] = True
        return payload

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    async def generate(self, prompt: str, config: GenerationConfig | None = None) -> ModelResponse:
        start = time.perf_counter()
        try:
            response = await self._http().post(self.url, json=self._payload(prompt, config, stream=False))
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            self._log_call(start, ok=False, mode="generate", prompt_len=len(prompt))
            raise ModelError(f"Model returned HTTP status {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            self._log_call(start, ok=False, mode="generate", prompt_len=len(prompt))
            raise ModelError(f"Model request failed: {exc.__class__.__name__}") from exc

        choices = data.get("choices") or []
        message = (choices[0].get("message") or {}) if choices else {}
        usage = data.get("usage") or {}
        elapsed_ms = self._log_call(start, ok=True, mode="generate", prompt_len=len(prompt))
        return ModelResponse(
            text=str(message.get("content") or ""),
            processing_time_ms=elapsed_ms,
            token_usage=TokenUsage(
                prompt_tokens=usage.get("prompt_tokens"),
                completion_tokens=usage.get("completion_tokens"),
                total_tokens=usage.get("total_tokens"),
            )
            if usage
            else None,
        )

    async def stream(self, prompt: str, config: GenerationConfig | None = None) -> AsyncIterator[str]:
        start = time.perf_counter()
        try:
            async with self._http().stream("POST", self.url, json=self._payload(prompt, config, stream=True)) as response:
                if response.status_code >= 400:
                    raise ModelError(f"Model returned HTTP status {response.status_code}")
                async for line in response.aiter_lines():
                    chunk = _parse_sse_line(line)
                    if chunk is None:
                        continue
                    if chunk == "[DONE]":
                        break
                    if chunk:
                        yield chunk
        except httpx.HTTPError as exc:
            self._log_call(start, ok=False, mode="stream", prompt_len=len(prompt))
            raise ModelError(f"Model stream failed: {exc.__class__.__name__}") from exc
        self._log_call(start, ok=True, mode="stream", prompt_len=len(prompt))

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _log_call(self, start: float, *, ok: bool, mode: str, prompt_len: int) -> int:
        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "model_call",
            extra={
                "extra_fields": {
                    "model": self.model,
                    "mode": mode,
                    "duration_ms": duration_ms,
                    "ok": ok,
                    "prompt_len": prompt_len,
                }
            },
        )
        return duration_ms


def _parse_sse_line(line: str) -> str | None:
    """Return the delta text of one SSE line, ``"[DONE]"``, or None to skip."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    body = line[len("data:") :].strip()
    if body == "[DONE]":
        return body
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return None
    choices = data.get("choices") or []
    if not choices:
        return None
    delta = choices[0].get("delta") or {}
    return str(delta.get("content") or "")
