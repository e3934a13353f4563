"""Configuration loader for the orchestration runtime."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from ondevice_ai.core.errors import ValidationError

CONFIG_ENV = "ONDEVICE_AI_CONFIG"


class ModelSettings(BaseModel):
    url: str = "http://127.0.0.1:8080/v1/chat/completions"
    model: str = "local"
    timeout_s: float = 45.0
    max_context_tokens: int = 4096


class ExecutorSettings(BaseModel):
    max_retries: int = Field(1, ge=0)
    retry_delay_s: float = Field(0.1, ge=0)


class MemoryKind(str, Enum):
    BUFFER = "buffer"
    SUMMARY = "summary"


class MemorySettings(BaseModel):
    kind: MemoryKind = MemoryKind.BUFFER
    max_entries: Optional[int] = Field(None, ge=1)
    max_recent_entries: int = Field(8, ge=2)


class AgentSettings(BaseModel):
    max_steps: int = Field(3, ge=1)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    to_file: bool = False
    log_dir: Optional[str] = None


class Settings(BaseModel):
    model: ModelSettings = Field(default_factory=ModelSettings)
    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    memory: MemorySettings = Field(default_factory=MemorySettings)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


_ENV_OVERRIDES = {
    "ONDEVICE_AI_MODEL_URL": ("model", "url"),
    "ONDEVICE_AI_MODEL": ("model", "model"),
    "ONDEVICE_AI_LOG_LEVEL": ("logging", "level"),
}


def load_settings(path: Optional[str | Path] = None) -> Settings:
    """Load settings from YAML, then apply ``ONDEVICE_AI_*`` environment overrides.

    The file is ``path`` if given, else ``$ONDEVICE_AI_CONFIG``; with neither,
    defaults are used.
    """
    raw_path = path or os.getenv(CONFIG_ENV)
    data: dict = {}
    if raw_path:
        cfg_path = Path(raw_path)
        if not cfg_path.exists():
            raise ValidationError(f"Config file not found: {cfg_path}")
        with cfg_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValidationError(f"Config file must contain a mapping: {cfg_path}")

    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            data.setdefault(section, {})[key] = value

    return Settings.model_validate(data)
