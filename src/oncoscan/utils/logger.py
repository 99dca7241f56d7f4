"""Structured logging configuration."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

from ..config import get_settings

if TYPE_CHECKING:
    from loguru import Logger

_CONFIGURED = False


def _configure() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    settings = get_settings()
    level = settings.log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level)
    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "oncoscan.log",
            rotation="10 MB",
            retention="10 days",
            level=level,
        )
    _CONFIGURED = True


def get_logger(name: Optional[str] = None) -> "Logger":
    _configure()
    return logger.bind(module=name or "oncoscan")
