"""Loguru sink configuration."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from prefpanes.config.schema import LoggingConfig

_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def configure_logging(config: LoggingConfig | None = None, *, verbose: bool = False) -> None:
    """Replace loguru's default sink with stderr (and a file, if configured)."""
    config = config or LoggingConfig()
    level = "DEBUG" if verbose else config.level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)
    if config.file:
        path = Path(config.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(path, level="DEBUG", rotation="1 MB", retention=3, encoding="utf-8")
