from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def isolate_ondevice_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ONDEVICE_AI_CONFIG",
        "ONDEVICE_AI_MODEL_URL",
        "ONDEVICE_AI_MODEL",
        "ONDEVICE_AI_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
