from __future__ import annotations

import asyncio
import logging

import pytest

from ondevice_ai import OnDeviceAI, RewriteStyle
from ondevice_ai.core.config import AgentSettings, MemoryKind, MemorySettings, Settings
from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.memory import BufferMemory, SummaryMemory
from ondevice_ai.core.models import OpenAICompatModel
from ondevice_ai.core.pipeline import Pipeline
from ondevice_ai.testing import ScriptedModel


def test_facade_runs_builtin_features_on_its_model() -> None:
    model = ScriptedModel(["* Key point", "positive: 0.8", "Hallo", "Hey there!", "Fixed text."])
    ai = OnDeviceAI(model)

    assert asyncio.run(ai.summarize("long text")).summary == "Key point"
    assert asyncio.run(ai.classify("nice")).top_classification.label == "positive"
    assert asyncio.run(ai.translate("Hello", target_language="de")).translated_text == "Hallo"
    assert asyncio.run(ai.rewrite("Hello", RewriteStyle.FRIENDLY)).rewritten_text == "Hey there!"
    assert asyncio.run(ai.proofread("Fixd text.")).has_corrections
    assert model.call_count == 5


def test_facade_builds_configured_components() -> None:
    settings = Settings(memory=MemorySettings(kind=MemoryKind.SUMMARY, max_recent_entries=4))
    ai = OnDeviceAI(ScriptedModel(), settings=settings)

    assert isinstance(ai.pipeline(), Pipeline)
    assert isinstance(ai.session().memory, SummaryMemory)
    assert ai.agent().config.max_steps == 3
    assert ai.executor().max_retries == 1
    assert ai.executor(max_retries=0).max_retries == 0

    default_ai = OnDeviceAI(ScriptedModel())
    assert isinstance(default_ai.memory(), BufferMemory)


def test_agent_builder_passes_explicit_step_limit_through() -> None:
    ai = OnDeviceAI(ScriptedModel(), settings=Settings(agent=AgentSettings(max_steps=5)))

    assert ai.agent().config.max_steps == 5
    assert ai.agent(max_steps=2).config.max_steps == 2
    with pytest.raises(ValidationError):
        ai.agent(max_steps=0)


def test_from_settings_builds_http_model(monkeypatch) -> None:
    monkeypatch.setenv("ONDEVICE_AI_MODEL", "phi-3-mini")

    ai = OnDeviceAI.from_settings()

    assert isinstance(ai.model, OpenAICompatModel)
    assert ai.model.name == "openai-compat:phi-3-mini"
    logging.getLogger("ondevice_ai").handlers = []
