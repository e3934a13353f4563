from __future__ import annotations

import re

from .template import PromptTemplate

SUMMARIZE = PromptTemplate(
    "Summarize the following {input_type} into exactly {bullet_count} bullet point(s).\n\n"
    "Rules:\n"
    "- Output exactly {bullet_count} bullet point(s), each starting with \"* \"\n"
    "- Keep each bullet short and focused on one key point\n"
    "- Do not write anything before or after the bullet point(s)\n\n"
    "Text to summarize:\n"
    "<input>{text}</input>\n"
)

CLASSIFY = PromptTemplate(
    "Classify the following text into one or more of these categories: {categories}\n\n"
    "Return only the matching categories with confidence scores, one per line, formatted as:\n"
    "category: score\n\n"
    "Scores are between 0.0 and 1.0 and sum to 1.0. Do not add headers or explanations.\n\n"
    "Text to classify:\n"
    "<input>{text}</input>\n"
)

EXTRACT = PromptTemplate(
    "Extract entities from the following text.\n"
    "Entity types to find: {entity_types}\n\n"
    "Return only the entities, one per line, formatted as:\n"
    "type: value\n\n"
    "Do not add headers, numbering or explanations.\n\n"
    "Text:\n"
    "<input>{text}</input>\n"
)

TRANSLATE = PromptTemplate(
    "Translate the following text from {source_language} to {target_language}.\n"
    "Return only the translation.\n\n"
    "Text to translate:\n"
    "{text}\n"
)

REWRITE = PromptTemplate(
    "Rewrite the following text {style_instruction}\n"
    "Return only the rewritten text with no labels, headers or alternatives.\n\n"
    "Text to rewrite:\n"
    "<input>{text}</input>\n"
)

PROOFREAD = PromptTemplate(
    "Proofread the following text for grammar, spelling and punctuation errors.\n"
    "Return only the corrected text.\n\n"
    "Text to proofread:\n"
    "<input>{text}</input>\n"
)

CHAT = PromptTemplate(
    "{system_prompt}\n\n"
    "{language_instruction}\n\n"
    "{history}User: {text}\n"
    "Assistant:"
)

SUMMARIZE_MEMORY = PromptTemplate(
    "{existing_summary}Summarize this conversation in one or two concise sentences, "
    "keeping names, facts and decisions:\n"
    "{conversation}\n"
)

BUILTIN_PROMPTS: dict[str, PromptTemplate] = {
    "summarize": SUMMARIZE,
    "classify": CLASSIFY,
    "extract": EXTRACT,
    "translate": TRANSLATE,
    "rewrite": REWRITE,
    "proofread": PROOFREAD,
    "chat": CHAT,
    "summarize_memory": SUMMARIZE_MEMORY,
}

_PREAMBLE_MARKERS = ("certainly", "sure", "of course", "here is", "here's", "below is", "here are")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"(?<!\*)\*(?!\*)(.+?)(?<!\*)\*(?!\*)")
_HEADER_RE = re.compile(r"(?m)^#{1,6}\s+")


def strip_preamble(text: str) -> str:
    """Remove chatty preambles, wrapping quotes and markdown emphasis from model output."""
    result = text.strip()

    parts = result.split("\n\n")
    if len(parts) > 1 and any(marker in parts[0].lower() for marker in _PREAMBLE_MARKERS):
        result = "\n\n".join(parts[1:]).strip()

    if len(result) > 2 and result.startswith('"') and result.endswith('"'):
        result = result[1:-1]

    result = _BOLD_RE.sub(r"\1", result)
    result = _ITALIC_RE.sub(r"\1", result)
    result = _HEADER_RE.sub("", result)
    return result
