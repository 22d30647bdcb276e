"""loguru setup shared by the server and the CLI."""

from __future__ import annotations

import sys

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a formatted stderr sink at *level*."""
    logger.remove()
    logger.add(sys.stderr, format=_FORMAT, level=level.upper())


def log_config(values: dict[str, object]) -> None:
    """Log the effective configuration, one key per line."""
    for key, value in sorted(values.items()):
        logger.info("CFG {}: {}", key, value)
