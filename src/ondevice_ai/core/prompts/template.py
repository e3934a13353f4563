from __future__ import annotations

import re
from typing import Mapping

from ondevice_ai.core.errors import ValidationError

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


class PromptTemplate:
    """A template string with named ``{variable}`` placeholders."""

    def __init__(self, template: str, input_variables: list[str] | None = None) -> None:
        self.template = template
        if input_variables is None:
            input_variables = _detect_variables(template)
        self.input_variables = list(input_variables)

    @classmethod
    def from_template(cls, template: str) -> "PromptTemplate":
        return cls(template)

    def format(self, values: Mapping[str, object]) -> str:
        missing = [name for name in self.input_variables if name not in values]
        if missing:
            raise ValidationError(f"Missing template variable(s): {', '.join(missing)}")

        def _substitute(match: re.Match[str]) -> str:
            name = match.group(1)
            if name in values:
                return str(values[name])
            return match.group(0)

        return _PLACEHOLDER_RE.sub(_substitute, self.template)

    def __repr__(self) -> str:
        return f"PromptTemplate(input_variables={self.input_variables!r})"


def _detect_variables(template: str) -> list[str]:
    seen: list[str] = []
    for name in _PLACEHOLDER_RE.findall(template):
        if name not in seen:
            seen.append(name)
    return seen
