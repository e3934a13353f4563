from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from ondevice_ai.core.config import LoggingSettings
from ondevice_ai.core.logging.setup import configure_logging


def test_configure_logging_is_idempotent() -> None:
    logger = logging.getLogger("ondevice_ai")
    logger.handlers = []

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    assert len(logger.handlers) == first_count
    logger.handlers = []


def test_logging_file_rotation_handler_configured(tmp_path) -> None:
    logger = logging.getLogger("ondevice_ai")
    logger.handlers = []
    settings = LoggingSettings(to_file=True, log_dir=str(tmp_path / "custom-logs"))

    configure_logging(settings)
    configure_logging(settings)

    handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(handlers) == 1
    assert (tmp_path / "custom-logs").exists()
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []


def test_log_level_env_overrides_settings(monkeypatch) -> None:
    monkeypatch.setenv("ONDEVICE_AI_LOG_LEVEL", "debug")
    logger = logging.getLogger("ondevice_ai")
    logger.handlers = []

    configure_logging(LoggingSettings(level="WARNING"))

    assert logger.level == logging.DEBUG
    logger.handlers = []
