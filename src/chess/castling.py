"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Self

from src.chess.square import Position
from src.core.shared_types import Color


class CastlingDirection(Enum):
    """The four castling directions. Values are the attribute names in CastlingRights."""

    WHITE_KING_SIDE = "white_king_side"
    WHITE_QUEEN_SIDE = "white_queen_side"
    BLACK_KING_SIDE = "black_king_side"
    BLACK_QUEEN_SIDE = "black_queen_side"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.name.startswith("WHITE") else Color.BLACK


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If castling rights have not been revoked, we expect the king / rook still at their starting squares,
    but the move generator double-checks the board anyway.
    """

    king_from: Position
    king_to: Position
    rook_from: Position
    rook_to: Position

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Position.from_algebraic(k_from)
        king_to = Position.from_algebraic(k_to)
        rook_from = Position.from_algebraic(r_from)
        rook_to = Position.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    def squares_between(self) -> list[Position]:
        """Squares strictly between king and rook: must be empty to castle"""
        low, high = sorted((self.king_from.col, self.rook_from.col))
        return [Position(self.king_from.row, col) for col in range(low + 1, high)]

    def king_path(self) -> list[Position]:
        """Squares the king crosses and lands on: none of them may be attacked"""
        step = 1 if self.king_to.col > self.king_from.col else -1
        return [
            Position(self.king_from.row, col)
            for col in range(self.king_from.col + step, self.king_to.col + step, step)
        ]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_directions(color: Color) -> list[CastlingDirection]:
    return [direction for direction in CastlingDirection if direction.color == color]


def castling_direction_for_king_move(
    king_from: Position, king_to: Position
) -> CastlingDirection | None:
    """A king move that matches one of the castling rules (two files sideways from the home square)"""
    return next(
        (
            direction
            for direction, squares in CASTLING_RULES.items()
            if squares.king_from == king_from and squares.king_to == king_to
        ),
        None,
    )


@dataclass(frozen=True)
class CastlingRights:
    """Rights only ever get revoked during the game, never restored."""

    white_king_side: bool = True
    white_queen_side: bool = True
    black_king_side: bool = True
    black_queen_side: bool = True

    @classmethod
    def none(cls) -> Self:
        return cls(False, False, False, False)

    def has(self, direction: CastlingDirection) -> bool:
        return getattr(self, direction.value)

    def has_any(self, color: Color) -> bool:
        return any(self.has(direction) for direction in castling_directions(color))

    def revoke(self, *directions: CastlingDirection) -> Self:
        return replace(self, **{direction.value: False for direction in directions})

    def revoke_all(self, color: Color) -> Self:
        return self.revoke(*castling_directions(color))

    def revoke_for_square(self, square: Position) -> Self:
        """Something left (or got captured on) a rook's home corner: that direction is gone for good."""
        lost = [
            direction
            for direction, squares in CASTLING_RULES.items()
            if squares.rook_from == square
        ]
        return self.revoke(*lost) if lost else self
