"""Loguru sink configuration."""

import sys

from loguru import logger

from repro_engine.core.config import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> int:
    """Replace the default loguru sink with one at the configured level.

    Returns the id of the new sink.
    """
    settings = settings or get_settings()
    logger.remove()
    return logger.add(
        sys.stderr,
        level=settings.log_level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
        ),
        backtrace=settings.debug,
        diagnose=settings.debug,
    )
