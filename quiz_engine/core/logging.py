"""
Loguru sink setup shared by the API server and the CLI.
"""

from __future__ import annotations

import sys

from loguru import logger

from config import Settings, get_settings

LOG_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}"


def configure_logging(settings: Settings | None = None, level: str | None = None) -> None:
    """Replace loguru's default handler with the engine's sinks."""
    settings = settings or get_settings()
    level = level or settings.log_level

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if settings.log_file:
        logger.add(
            settings.log_file,
            level=level,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )
