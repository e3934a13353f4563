from __future__ import annotations

import re

_SECRET_VALUE_RE = re.compile(r"(?i)(token|key|secret|password)(\s*[=:]\s*)([^\s,;]+)")
_BEARER_RE = re.compile(r"(?i)(bearer\s+)([^\s]+)")
EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"(?<!\w)\+?(?:\d[\s().-]{0,2}){9,14}\d(?!\w)")


def redact_string(s: str) -> str:
    redacted = _SECRET_VALUE_RE.sub(lambda m: f"{m.group(1)}{m.group(2)}***", s)
    redacted = _BEARER_RE.sub(lambda m: f"{m.group(1)}***", redacted)
    return redacted


def redact_personal(s: str, mask: str = "***") -> tuple[str, int]:
    """Mask secrets, email addresses and phone numbers; return the text and the number of masked spans."""
    count = 0

    def _mask(match: re.Match[str]) -> str:
        nonlocal count
        count += 1
        return mask

    redacted = redact_string(s)
    if redacted != s:
        count += 1
    redacted = EMAIL_RE.sub(_mask, redacted)
    redacted = PHONE_RE.sub(_mask, redacted)
    return redacted, count
