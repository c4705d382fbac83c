"""The Game board: an immutable 8x8 grid of (optional) pieces.

Every 'mutation' hands back a new Board, so a board can be shared between game states
and used as scratch space for legality checks without side effects.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Optional, Self

from src.chess.pieces import Piece
from src.chess.square import BOARD_SIZE, Position
from src.core.shared_types import Color, PieceType

Row = tuple[Optional[Piece], ...]
Grid = tuple[Row, ...]

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_PLACEMENT = "/".join(["8"] * BOARD_SIZE)


@dataclass(frozen=True)
class Board:
    squares: Grid

    def __post_init__(self) -> None:
        if len(self.squares) != BOARD_SIZE or any(
            len(row) != BOARD_SIZE for row in self.squares
        ):
            raise ValueError(f"A board must have {BOARD_SIZE}x{BOARD_SIZE} squares.")

    @classmethod
    def empty(cls) -> Self:
        return cls(tuple((None,) * BOARD_SIZE for _ in range(BOARD_SIZE)))

    @classmethod
    def initial(cls) -> Self:
        """Standard starting arrangement"""
        return cls.from_placement(STARTING_PLACEMENT)

    @classmethod
    def from_placement(cls, placement: str) -> Self:
        """Construct a board from a piece placement string.

        Same layout as the first field of a FEN string, ex. the starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * ranks are separated by slashes, read from the 8th rank (row 0) down to the 1st rank (row 7)
        * each rank is read from the a-file to the h-file
        * a letter is a piece (capital letters for white), a digit a run of empty squares
        """
        ranks = placement.split("/")
        if len(ranks) != BOARD_SIZE:
            raise ValueError(f"Expected {BOARD_SIZE} ranks in {placement!r}")

        grid: list[Row] = []
        for rank in ranks:
            row: list[Optional[Piece]] = []
            for character in rank:
                if character.isdigit():
                    row.extend([None] * int(character))
                else:
                    row.append(Piece.from_fen(character))
            grid.append(tuple(row))
        return cls(tuple(grid))

    def to_placement(self) -> str:
        """Ranks are separated by slashes."""
        return "/".join(self._row_to_placement(row) for row in self.squares)

    @staticmethod
    def _row_to_placement(row: Row) -> str:
        characters: list[str] = []
        empty_count = 0
        for piece in row:
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                characters.append(str(empty_count))
                empty_count = 0
            characters.append(piece.to_fen())

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            characters.append(str(empty_count))
        return "".join(characters)

    # --- QUERIES ---
    def piece(self, position: Position) -> Optional[Piece]:
        return self.squares[position.row][position.col]

    def is_empty(self, position: Position) -> bool:
        return self.piece(position) is None

    def pieces(self, color: Optional[Color] = None) -> Iterator[tuple[Position, Piece]]:
        """All occupied squares, scanned row by row (optionally only those of one color)."""
        for row_idx, row in enumerate(self.squares):
            for col_idx, piece in enumerate(row):
                if piece is None:
                    continue
                if color is not None and piece.color != color:
                    continue
                yield Position(row_idx, col_idx), piece

    def locate_color(self, color: Color) -> list[Position]:
        return [position for position, _ in self.pieces(color)]

    def locate_king(self, color: Color) -> Optional[Position]:
        king = Piece(PieceType.KING, color)
        return next(
            (position for position, piece in self.pieces(color) if piece == king),
            None,
        )

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {
            color: sum(piece.points for _, piece in self.pieces(color)) for color in Color
        }

    # --- COPY-ON-WRITE UPDATES ---
    def place_piece(self, piece: Optional[Piece], position: Position) -> Self:
        """New board with the square set (None empties it)"""
        grid = [list(row) for row in self.squares]
        grid[position.row][position.col] = piece
        return type(self)(tuple(tuple(row) for row in grid))

    def remove_piece(self, position: Position) -> Self:
        return self.place_piece(None, position)

    def move_piece(self, from_position: Position, to_position: Position) -> Self:
        """Relocate whatever stands on `from_position` (capturing whatever stood on `to_position`)"""
        grid = [list(row) for row in self.squares]
        grid[to_position.row][to_position.col] = grid[from_position.row][from_position.col]
        grid[from_position.row][from_position.col] = None
        return type(self)(tuple(tuple(row) for row in grid))

    def __str__(self) -> str:
        return "\n".join(
            " ".join(piece.to_fen() if piece else "." for piece in row)
            for row in self.squares
        )


def create_initial_board() -> Board:
    return Board.initial()
