from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ondevice_ai.core.config import LoggingSettings

from .json_formatter import JSONFormatter

_LOGGER_NAME = "ondevice_ai"
_CONFIGURED_ATTR = "_ondevice_ai_json_logging"


def _parse_level(raw: str) -> int:
    normalized = raw.strip().upper()
    return getattr(logging, normalized, logging.INFO)


def configure_logging(settings: LoggingSettings | None = None) -> logging.Logger:
    """Attach JSON handlers to the ``ondevice_ai`` logger. Safe to call repeatedly.

    ``ONDEVICE_AI_LOG_LEVEL`` wins over ``settings.level``.
    """
    settings = settings or LoggingSettings()
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(_parse_level(os.getenv("ONDEVICE_AI_LOG_LEVEL") or settings.level))
    logger.propagate = False

    formatter = JSONFormatter()

    if not any(getattr(handler, _CONFIGURED_ATTR, False) for handler in logger.handlers):
        stdout_handler = logging.StreamHandler(stream=sys.stdout)
        stdout_handler.setFormatter(formatter)
        setattr(stdout_handler, _CONFIGURED_ATTR, True)
        logger.addHandler(stdout_handler)

    if settings.to_file:
        log_dir = Path(settings.log_dir or "logs")
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = Path(os.path.abspath(log_dir / "ondevice_ai.log"))
        max_bytes = int(os.getenv("ONDEVICE_AI_LOG_MAX_BYTES", "5000000"))
        backup_count = int(os.getenv("ONDEVICE_AI_LOG_BACKUP_COUNT", "5"))

        file_exists = any(
            isinstance(handler, RotatingFileHandler)
            and getattr(handler, _CONFIGURED_ATTR, False)
            and Path(handler.baseFilename) == log_path
            for handler in logger.handlers
        )
        if not file_exists:
            file_handler = RotatingFileHandler(
                filename=log_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            setattr(file_handler, _CONFIGURED_ATTR, True)
            logger.addHandler(file_handler)

    return logger
