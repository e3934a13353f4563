from __future__ import annotations

import json
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ondevice_ai.core.errors import OutputParseError

ModelT = TypeVar("ModelT", bound=BaseModel)


class TextOutputParser:
    format_instructions = ""

    def parse(self, text: str) -> str:
        return text.strip()


class ListOutputParser:
    def __init__(self, delimiter: str = "\n") -> None:
        self.delimiter = delimiter

    @property
    def format_instructions(self) -> str:
        return f"Return items separated by {self.delimiter!r}, one per line."

    def parse(self, text: str) -> list[str]:
        return [item.strip() for item in text.split(self.delimiter) if item.strip()]


class JSONOutputParser(Generic[ModelT]):
    """Parse fenced or prose-wrapped JSON model output into a pydantic model."""

    format_instructions = "Respond only with valid JSON matching the expected schema. No explanations."

    def __init__(self, model_cls: type[ModelT]) -> None:
        self.model_cls = model_cls

    def parse(self, text: str) -> ModelT:
        cleaned = text.strip()
        if cleaned.startswith("```"):
            cleaned = cleaned.strip("`")
            if cleaned.startswith("json"):
                cleaned = cleaned[4:].strip()
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start == -1 or end == -1 or end < start:
            raise OutputParseError("No JSON object found in model output")
        try:
            payload = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError as exc:
            raise OutputParseError(f"Invalid JSON in model output: {exc.msg}") from exc
        try:
            return self.model_cls.model_validate(payload)
        except PydanticValidationError as exc:
            raise OutputParseError(f"Model output does not match {self.model_cls.__name__}") from exc
