"""
A square on the board

(placed in its own module as multiple other modules need to import it)

Coordinates follow the way the board is drawn on screen: row 0 is the 8th rank (black's home side),
row 7 is the 1st rank (white's home side). Columns 0 - 7 are files a - h.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import InvalidSquareError

# Chess board is always 8x8.
BOARD_SIZE = 8
FILE_LETTERS = "abcdefgh"
RANK_NUMBERS = "87654321"


@dataclass(frozen=True, order=True)
class Position:
    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Position:
        """Algebraic notation: 'a8' -> (0, 0), 'h1' -> (7, 7)"""
        if len(sq) != 2 or sq[0] not in FILE_LETTERS or sq[1] not in RANK_NUMBERS:
            raise InvalidSquareError(f"Cannot interpret {sq!r} as a square name.")
        return cls(row=RANK_NUMBERS.index(sq[1]), col=FILE_LETTERS.index(sq[0]))

    def to_algebraic(self) -> str:
        return f"{FILE_LETTERS[self.col]}{RANK_NUMBERS[self.row]}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_SIZE) and (0 <= self.col < BOARD_SIZE)

    def shifted(self, d_row: int, d_col: int) -> Position:
        """Neighbouring square along a direction. May fall off the board: check `is_within_bounds()`."""
        return Position(self.row + d_row, self.col + d_col)

    def __str__(self) -> str:
        if self.is_within_bounds():
            return self.to_algebraic()
        return f"({self.row}, {self.col})"


ALL_POSITIONS: tuple[Position, ...] = tuple(
    Position(row, col) for row in range(BOARD_SIZE) for col in range(BOARD_SIZE)
)
