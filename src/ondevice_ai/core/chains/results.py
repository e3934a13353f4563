from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class _Result(BaseModel):
    model_config = ConfigDict(frozen=True)


class SummarizeResult(_Result):
    summary: str
    bullets: list[str] = Field(default_factory=list)
    original_length: int
    summary_length: int


class Classification(_Result):
    label: str
    score: float


class ClassifyResult(_Result):
    classifications: list[Classification]
    top_classification: Classification


class Entity(_Result):
    type: str
    value: str
    confidence: float


class ExtractResult(_Result):
    entities: list[Entity] = Field(default_factory=list)


class ChatResult(_Result):
    message: str
    can_continue: bool = True


class TranslateResult(_Result):
    translated_text: str
    source_language: str
    target_language: str


class RewriteStyle(str, Enum):
    ELABORATE = "elaborate"
    EMOJIFY = "emojify"
    SHORTEN = "shorten"
    FRIENDLY = "friendly"
    PROFESSIONAL = "professional"
    REPHRASE = "rephrase"


class RewriteResult(_Result):
    rewritten_text: str
    style: RewriteStyle


class ProofreadCorrection(_Result):
    original: str
    corrected: str
    start_pos: int | None = None
    end_pos: int | None = None


class ProofreadResult(_Result):
    corrected_text: str
    corrections: list[ProofreadCorrection] = Field(default_factory=list)
    has_corrections: bool
