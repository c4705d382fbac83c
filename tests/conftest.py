"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Iterator

import pytest

from src.chess.game import GameState, apply_move
from src.chess.pieces import FEN_TO_PIECE
from src.chess.square import Position
from src.core.config import get_settings

PlayMovesFn = Callable[..., GameState]


@pytest.fixture
def play_moves() -> PlayMovesFn:
    """Call the inner function with a state and any number of UCI-like moves ('e2e4', 'e7e8q')."""

    def _play(state: GameState, *moves: str) -> GameState:
        for move in moves:
            promotion = FEN_TO_PIECE[move[4]] if len(move) == 5 else None
            state = apply_move(
                state,
                Position.from_algebraic(move[:2]),
                Position.from_algebraic(move[2:4]),
                promotion,
            )
        return state

    return _play


@pytest.fixture
def fresh_settings() -> Iterator[None]:
    """Re-read the environment before the test (after monkeypatching it) and forget it afterwards."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
