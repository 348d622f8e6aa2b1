"""Logger setup for the ``kudos`` package."""

from __future__ import annotations

import logging
from typing import Optional

_ROOT = "kudos"


def setup_logger(level: Optional[str] = None) -> logging.Logger:
    """Configure the package logger once and return it.

    *level* defaults to the ``log_level`` setting.
    """
    if level is None:
        from kudos.config import get_settings

        level = get_settings().log_level

    logger = logging.getLogger(_ROOT)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Avoid stacking handlers on repeated setup
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(console_handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger for module *name*."""
    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")
