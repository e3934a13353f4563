from __future__ import annotations

import re

import pytest

from ondevice_ai.core.errors import ValidationError
from ondevice_ai.core.prompts import BUILTIN_PROMPTS, PromptTemplate, strip_preamble


def test_prompt_template_detects_variables_in_order() -> None:
    template = PromptTemplate("Hello {name}, you are {age}. Bye {name}.")

    assert template.input_variables == ["name", "age"]


def test_prompt_template_missing_variable_raises() -> None:
    template = PromptTemplate.from_template("Translate {text} to {language}")

    with pytest.raises(ValidationError) as exc:
        template.format({"text": "hi"})

    assert "language" in str(exc.value)


def test_prompt_template_formats_without_leftover_placeholders() -> None:
    template = PromptTemplate("Translate {text} to {language}")

    result = template.format({"text": "hi", "language": "French", "unused": "x"})

    assert result == "Translate hi to French"
    assert not re.search(r"\{\w+\}", result)


def test_prompt_template_does_not_resubstitute_values() -> None:
    template = PromptTemplate("{a} and {b}")

    assert template.format({"a": "{b}", "b": "x"}) == "{b} and x"


def test_builtin_prompts_fill_completely() -> None:
    for name, template in BUILTIN_PROMPTS.items():
        rendered = template.format({var: f"<{var}>" for var in template.input_variables})
        assert not re.search(r"\{\w+\}", rendered), name


def test_strip_preamble_removes_chatter_and_markdown() -> None:
    text = "Sure, here is the result:\n\n**Hello** world"

    assert strip_preamble(text) == "Hello world"
    assert strip_preamble('"quoted answer"') == "quoted answer"
