"""
Formatting helpers for the presentation layer: square names, piece letters, move strings.

Pure formatting, no rules knowledge.
"""

from typing import TYPE_CHECKING

from src.chess.castling import CastlingDirection
from src.chess.pieces import Piece
from src.chess.square import Position
from src.core.shared_types import PieceType

if TYPE_CHECKING:
    from src.chess.game import MoveRecord

PIECE_LETTERS: dict[PieceType, str] = {
    PieceType.KING: "K",
    PieceType.QUEEN: "Q",
    PieceType.ROOK: "R",
    PieceType.BISHOP: "B",
    PieceType.KNIGHT: "N",
    PieceType.PAWN: "",
}

KING_SIDE_CASTLE = "O-O"
QUEEN_SIDE_CASTLE = "O-O-O"


def position_to_notation(position: Position) -> str:
    """(7, 0) -> 'a1', (0, 7) -> 'h8'"""
    return position.to_algebraic()


def notation_to_position(notation: str) -> Position:
    """'a1' -> (7, 0). Raises InvalidSquareError for anything outside 'a1' - 'h8'"""
    return Position.from_algebraic(notation)


def piece_to_notation(piece: Piece) -> str:
    """K/Q/R/B/N; pawns go without a letter"""
    return PIECE_LETTERS[piece.type]


def piece_symbol(piece: Piece) -> str:
    return piece.symbol


def move_to_notation(record: "MoveRecord") -> str:
    """
    Long algebraic notation
    ----

    * "e2-e4": the pawn on e2 moves to e4
    * "Bc4xf7+": the bishop on c4 takes on f7, giving check
    * "e7-e8=Q": promotion
    * "O-O" / "O-O-O": king-side / queen-side castling
    * "#" instead of "+" for checkmate
    """
    if record.castling is not None:
        king_side = record.castling in (
            CastlingDirection.WHITE_KING_SIDE,
            CastlingDirection.BLACK_KING_SIDE,
        )
        move_str = KING_SIDE_CASTLE if king_side else QUEEN_SIDE_CASTLE
    else:
        separator = "x" if record.is_capture else "-"
        move_str = (
            f"{piece_to_notation(record.piece)}"
            f"{position_to_notation(record.from_square)}"
            f"{separator}"
            f"{position_to_notation(record.to_square)}"
        )
        if record.promotion is not None:
            move_str += f"={PIECE_LETTERS[record.promotion]}"

    if record.is_checkmate:
        return move_str + "#"
    if record.gives_check:
        return move_str + "+"
    return move_str
