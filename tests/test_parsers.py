from __future__ import annotations

import pytest
from pydantic import BaseModel

from ondevice_ai.core.errors import OutputParseError, ValidationError
from ondevice_ai.core.parsers import JSONOutputParser, ListOutputParser, TextOutputParser


class Weather(BaseModel):
    city: str
    temperature: float


def test_text_and_list_parsers() -> None:
    assert TextOutputParser().parse("  hi  ") == "hi"
    assert ListOutputParser(",").parse("a, b,, c ") == ["a", "b", "c"]


def test_json_parser_handles_fences_and_prose() -> None:
    parser = JSONOutputParser(Weather)

    fenced = parser.parse('```json\n{"city": "Seoul", "temperature": 21.5}\n```')
    prose = parser.parse('Sure! {"city": "Paris", "temperature": 18} Hope that helps.')

    assert fenced == Weather(city="Seoul", temperature=21.5)
    assert prose.city == "Paris"


def test_json_parser_errors_are_validation_errors() -> None:
    parser = JSONOutputParser(Weather)

    with pytest.raises(OutputParseError):
        parser.parse("no json here")
    with pytest.raises(OutputParseError):
        parser.parse('{"city": "Seoul"}')
    with pytest.raises(ValidationError):
        parser.parse("{not json}")
