"""
Runtime configuration, read from environment variables.

* CHESS_LOG_LEVEL: name of the logging level (default WARNING)
* CHESS_DEFAULT_PROMOTION: piece a pawn turns into when it reaches the last rank and
  no choice was supplied (default queen)
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

from src.core.shared_types import PROMOTION_OPTIONS, PieceType

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_PROMOTION = PieceType.QUEEN.value


def _read_log_level() -> str:
    level = os.getenv("CHESS_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level in CHESS_LOG_LEVEL: {level!r}")
    return level


def _read_default_promotion() -> PieceType:
    value = os.getenv("CHESS_DEFAULT_PROMOTION", DEFAULT_PROMOTION).strip().lower()
    if value not in {option.value for option in PROMOTION_OPTIONS}:
        raise ValueError(
            f"CHESS_DEFAULT_PROMOTION must be one of {', '.join(PROMOTION_OPTIONS)}, got {value!r}"
        )
    return PieceType(value)


@dataclass(frozen=True)
class Settings:
    log_level: str = field(default_factory=_read_log_level)
    default_promotion: PieceType = field(default_factory=_read_default_promotion)

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings are read once. Tests call `get_settings.cache_clear()` after patching the environment."""
    return Settings()
