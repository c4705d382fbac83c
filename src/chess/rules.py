"""
Check detection, legality filtering and the end-of-game conditions.

A pseudo-legal move (see moves.py) is legal if, after making it on a scratch copy of the board,
the mover's own king is not in check. Boards are immutable, so a 'scratch copy' is simply the
new Board returned by the move helpers: nothing needs to be undone afterwards.
"""

from typing import Optional

from src.chess.board import Board
from src.chess.castling import CASTLING_RULES, CastlingRights, castling_direction_for_king_move
from src.chess.moves import en_passant_victim_square, is_square_attacked, moves_for
from src.chess.pieces import Piece
from src.chess.square import Position
from src.core.logger import get_logger
from src.core.shared_types import Color, PieceType

logger = get_logger(__name__)


def is_in_check(board: Board, color: Color) -> bool:
    """Is the king of `color` attacked by any of the opponent's pieces?

    Without a king on the board there is nothing to attack: treated as 'not in check'.
    """
    king_position = board.locate_king(color)
    if king_position is None:
        logger.warning("No %s king on the board, treating it as not in check.", color)
        return False
    return is_square_attacked(king_position, color.opponent, board)


def simulate_move(
    board: Board,
    from_position: Position,
    to_position: Position,
    en_passant_target: Optional[Position] = None,
) -> Board:
    """
    The board right after the move (without promotion, which never changes whether your own king is safe)
    ---

    Besides relocating the moving piece:
    * a castling king brings its rook along
    * a pawn taking en passant removes the pawn that passed it, which may open a line onto your own king
    """
    piece = board.piece(from_position)
    new_board = board.move_piece(from_position, to_position)
    if piece is None:
        return new_board

    if piece.type == PieceType.KING:
        direction = castling_direction_for_king_move(from_position, to_position)
        if direction is not None:
            squares = CASTLING_RULES[direction]
            new_board = new_board.move_piece(squares.rook_from, squares.rook_to)

    is_en_passant = (
        piece.type == PieceType.PAWN
        and to_position == en_passant_target
        and from_position.col != to_position.col
        and board.piece(to_position) is None
    )
    if is_en_passant:
        new_board = new_board.remove_piece(
            en_passant_victim_square(from_position, to_position)
        )
    return new_board


def legal_moves_for(
    board: Board,
    position: Position,
    piece: Piece,
    castling_rights: CastlingRights,
    en_passant_target: Optional[Position],
) -> list[Position]:
    """Pseudo-legal destinations that do not leave the mover's king in check"""
    candidates = moves_for(board, position, piece, castling_rights, en_passant_target)
    return [
        target
        for target in candidates
        if not is_in_check(
            simulate_move(board, position, target, en_passant_target), piece.color
        )
    ]


def all_legal_moves(
    board: Board,
    color: Color,
    castling_rights: CastlingRights,
    en_passant_target: Optional[Position],
) -> dict[Position, list[Position]]:
    """Legal destinations per origin square, leaving out pieces that cannot move at all"""
    legal_moves: dict[Position, list[Position]] = {}
    for position, piece in board.pieces(color):
        destinations = legal_moves_for(
            board, position, piece, castling_rights, en_passant_target
        )
        if destinations:
            legal_moves[position] = destinations
    return legal_moves


def has_any_legal_move(
    board: Board,
    color: Color,
    castling_rights: CastlingRights,
    en_passant_target: Optional[Position],
) -> bool:
    """Stops scanning at the first piece that can move"""
    return any(
        legal_moves_for(board, position, piece, castling_rights, en_passant_target)
        for position, piece in board.pieces(color)
    )


# --- CHECKS FOR ENDING THE GAME ---
def is_checkmate(
    board: Board,
    color: Color,
    castling_rights: CastlingRights,
    en_passant_target: Optional[Position],
) -> bool:
    return is_in_check(board, color) and not has_any_legal_move(
        board, color, castling_rights, en_passant_target
    )


def is_stalemate(
    board: Board,
    color: Color,
    castling_rights: CastlingRights,
    en_passant_target: Optional[Position],
) -> bool:
    return not is_in_check(board, color) and not has_any_legal_move(
        board, color, castling_rights, en_passant_target
    )
