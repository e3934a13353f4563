from __future__ import annotations

import asyncio

import pytest

from ondevice_ai.core.chains import (
    ChatChain,
    ClassifyChain,
    ExtractChain,
    ProofreadChain,
    RewriteChain,
    RewriteStyle,
    SummarizeChain,
    TranslateChain,
    detect_language,
)
from ondevice_ai.core.chains.builtin.proofread import diff_corrections
from ondevice_ai.core.chains.results import ClassifyResult, SummarizeResult
from ondevice_ai.core.errors import ModelError, ValidationError
from ondevice_ai.core.memory import BufferMemory
from ondevice_ai.core.schemas import ChainInput, GenerationConfig
from ondevice_ai.testing import ScriptedModel


def test_summarize_parses_bullets_and_keeps_bullet_count() -> None:
    model = ScriptedModel(["* First point\n* Second point\n* Third point"])
    chain = SummarizeChain(model, bullet_count=2)

    output = asyncio.run(chain.invoke(ChainInput(text="A long article body.")))

    result = output.typed(SummarizeResult)
    assert result is not None
    assert result.bullets == ["First point", "Second point"]
    assert output.text == "First point\nSecond point"
    assert result.original_length == len("A long article body.")
    assert output.raw.startswith("* First point")
    assert "exactly 2 bullet point(s)" in model.prompts[0]
    assert model.configs[0] == GenerationConfig.STRUCTURED


def test_summarize_without_bullets_strips_preamble() -> None:
    model = ScriptedModel(["Here is a summary:\n\nJust one sentence."])

    result = asyncio.run(SummarizeChain(model).run("text"))

    assert result.summary == "Just one sentence."
    assert result.bullets == []


def test_summarize_rejects_zero_bullets() -> None:
    with pytest.raises(ValidationError):
        SummarizeChain(ScriptedModel(), bullet_count=0)


def test_classify_parses_scores_and_ignores_unknown_labels() -> None:
    model = ScriptedModel(["negative: 0.2\npositive: 0.7\nexcited: 0.1"])

    output = asyncio.run(ClassifyChain(model).invoke(ChainInput(text="I love it")))

    result = output.typed(ClassifyResult)
    assert [item.label for item in result.classifications] == ["positive", "negative"]
    assert result.top_classification.label == "positive"
    assert output.text == "positive"


def test_classify_falls_back_to_mentioned_category() -> None:
    model = ScriptedModel(["I think this is Negative overall."])

    result = asyncio.run(ClassifyChain(model, categories=["Positive", "Negative"]).run("meh"))

    assert result.top_classification.label == "negative"
    assert result.top_classification.score == 1.0


def test_classify_requires_categories() -> None:
    with pytest.raises(ValidationError):
        ClassifyChain(ScriptedModel(), categories=[])


def test_extract_parses_typed_and_untyped_lines() -> None:
    model = ScriptedModel(["person: Alice\nlocation: Paris\n\nsomething odd"])

    result = asyncio.run(ExtractChain(model, entity_types=["person", "location"]).run("Alice went to Paris"))

    assert [(e.type, e.value, e.confidence) for e in result.entities] == [
        ("person", "Alice", 0.9),
        ("location", "Paris", 0.9),
        ("extracted", "something odd", 0.8),
    ]


def test_extract_requires_entity_types() -> None:
    with pytest.raises(ValidationError):
        ExtractChain(ScriptedModel(), entity_types=[])


@pytest.mark.parametrize(
    ("text", "language"),
    [
        ("hello there", "English"),
        ("안녕하세요", "Korean"),
        ("こんにちは世界", "Japanese"),
        ("你好", "Chinese"),
        ("привет", "Russian"),
    ],
)
def test_detect_language(text: str, language: str) -> None:
    assert detect_language(text) == language


def test_chat_uses_memory_history_between_turns() -> None:
    model = ScriptedModel(["Hi Sam!", "Your name is Sam."])
    memory = BufferMemory()
    chain = ChatChain(model, memory=memory)

    first = asyncio.run(chain.run("My name is Sam"))
    second = asyncio.run(chain.run("What is my name?"))

    assert first.message == "Hi Sam!"
    assert second.message == "Your name is Sam."
    assert "User: My name is Sam\nAssistant: Hi Sam!" in model.prompts[1]
    assert model.prompts[1].rstrip().endswith("User: What is my name?\nAssistant:")
    assert "Reply in English only." in model.prompts[0]
    assert len(memory) == 4


def test_chat_stream_saves_memory_only_after_completion() -> None:
    model = ScriptedModel(["Hello there friend"])
    memory = BufferMemory()
    chain = ChatChain(model, memory=memory)

    async def collect() -> list[str]:
        return [chunk async for chunk in chain.stream_invoke(ChainInput(text="hi"))]

    chunks = asyncio.run(collect())

    assert "".join(chunks) == "Hello there friend"
    entries = asyncio.run(memory.load())
    assert [entry.content for entry in entries] == ["hi", "Hello there friend"]
    assert model.streams_closed == 1


def test_chat_stream_cancelled_early_releases_model_and_saves_nothing() -> None:
    model = ScriptedModel([["one ", "two ", "three"]])
    memory = BufferMemory()
    chain = ChatChain(model, memory=memory)

    async def take_first() -> str:
        stream = chain.stream_invoke(ChainInput(text="hi"))
        first = await stream.__anext__()
        await stream.aclose()
        return first

    assert asyncio.run(take_first()) == "one "
    assert model.chunks_yielded == 1
    assert model.streams_closed == 1
    assert len(memory) == 0


def test_chat_stream_error_propagates_and_saves_nothing() -> None:
    model = ScriptedModel([["one ", ModelError("backend dropped")]])
    memory = BufferMemory()
    chain = ChatChain(model, memory=memory)

    async def collect() -> list[str]:
        return [chunk async for chunk in chain.stream_invoke(ChainInput(text="hi"))]

    with pytest.raises(ModelError):
        asyncio.run(collect())
    assert len(memory) == 0


def test_translate_renders_language_names() -> None:
    model = ScriptedModel(["Bonjour"])

    result = asyncio.run(TranslateChain(model, target_language="fr").run("Hello"))

    assert result.translated_text == "Bonjour"
    assert result.target_language == "fr"
    assert "from English to French" in model.prompts[0]


def test_rewrite_accepts_style_name() -> None:
    model = ScriptedModel(["Short."])

    result = asyncio.run(RewriteChain(model, style="shorten").run("This is a rather long sentence."))

    assert result.style is RewriteStyle.SHORTEN
    assert result.rewritten_text == "Short."
    assert "more concise" in model.prompts[0]


def test_proofread_reports_word_corrections_with_offsets() -> None:
    model = ScriptedModel(["I have a cat."])

    result = asyncio.run(ProofreadChain(model).run("I has a cat."))

    assert result.has_corrections is True
    assert result.corrected_text == "I have a cat."
    assert len(result.corrections) == 1
    correction = result.corrections[0]
    assert (correction.original, correction.corrected) == ("has", "have")
    assert (correction.start_pos, correction.end_pos) == (2, 5)


def test_proofread_without_changes() -> None:
    assert diff_corrections("All good here.", "All good here.") == []
    result = asyncio.run(ProofreadChain(ScriptedModel(["All good here."])).run("All good here."))
    assert result.has_corrections is False


def test_model_error_propagates_without_retry() -> None:
    model = ScriptedModel([ModelError("offline")])

    with pytest.raises(ModelError):
        asyncio.run(SummarizeChain(model).run("text"))
    assert model.call_count == 1
