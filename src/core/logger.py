"""Logger configuration shared by all layers."""

import logging
import sys

from src.core.config import get_settings

_ROOT_LOGGER_NAME = "src"
_FORMATTER = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _configure_root() -> logging.Logger:
    """Attach a single stdout handler to the package logger (only once)."""
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_FORMATTER)
        root.addHandler(handler)
        root.setLevel(get_settings().log_level_number)
    return root


def get_logger(name: str) -> logging.Logger:
    """Module loggers: call with `__name__` so they hang below the package logger."""
    _configure_root()
    return logging.getLogger(name)


def set_level(level: int | str) -> None:
    _configure_root().setLevel(level)
