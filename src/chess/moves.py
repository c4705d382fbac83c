"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the (pseudo-legal) move sets for each piece type.
Pseudo-legal: the piece may move there according to its movement pattern and the occupancy of the board,
but the move may still leave its own king in check.

Legality is checked later by the rules module
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from src.chess.castling import CASTLING_RULES, CastlingRights, castling_directions
from src.chess.pieces import Piece
from src.chess.square import BOARD_SIZE, Position
from src.core.shared_types import Color, PieceType


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, position: Position) -> Optional[Piece]: ...


Vector = tuple[int, int]

STRAIGHTS: list[Vector] = [(0, 1), (0, -1), (1, 0), (-1, 0)]
DIAGONALS: list[Vector] = [(1, 1), (1, -1), (-1, 1), (-1, -1)]
KNIGHT_DELTAS: list[Vector] = [
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
]
KING_DELTAS: list[Vector] = STRAIGHTS + DIAGONALS


@dataclass(frozen=True)
class MoveContext:
    """The parts of the game state (besides the board) that decide on special moves"""

    castling_rights: CastlingRights
    en_passant_target: Optional[Position]


NO_CONTEXT = MoveContext(CastlingRights.none(), None)


# --- PAWN GEOMETRY ---
def pawn_direction(color: Color) -> int:
    """White moves UP the board (towards row 0), black moves DOWN (towards row 7)"""
    return -1 if color == Color.WHITE else 1


def pawn_start_row(color: Color) -> int:
    return BOARD_SIZE - 2 if color == Color.WHITE else 1


def promotion_row(color: Color) -> int:
    return 0 if color == Color.WHITE else BOARD_SIZE - 1


def en_passant_victim_square(
    capturing_from: Position, en_passant_target: Position
) -> Position:
    """The pawn taken en passant stands next to the capturing pawn: same row as the capturer, file of the target."""
    return Position(capturing_from.row, en_passant_target.col)


# --- MOVEMENT RULES ---
def raycasting_move(
    position: Position, board: Board, color: Color, directions: list[Vector]
) -> list[Position]:
    """
    Raycasting algorithm
    -----

    ---
    The main trick we use to check the 'line of sight of a piece'.
    We define move directions and move along them until we hit another piece or
    the edge of the board.
    """
    moves: list[Position] = []
    for d_row, d_col in directions:
        target = position.shifted(d_row, d_col)
        while target.is_within_bounds():
            piece_found = board.piece(target)
            if piece_found is not None:
                # only need to add the first occupied square found if it is the opponent's: then it can be captured.
                if piece_found.color != color:
                    moves.append(target)
                break
            moves.append(target)
            target = target.shifted(d_row, d_col)
    return moves


def single_step_move(
    position: Position, board: Board, color: Color, deltas: list[Vector]
) -> list[Position]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just jump a single step along a direction"""
    moves: list[Position] = []
    for d_row, d_col in deltas:
        target = position.shifted(d_row, d_col)
        if not target.is_within_bounds():
            continue

        piece_found = board.piece(target)
        if piece_found is None or piece_found.color != color:
            moves.append(target)
    return moves


def candidate_pawn_moves(
    position: Position, board: Board, color: Color, context: MoveContext
) -> list[Position]:
    """
    A pawn:
    - moves by a single square forward (only onto an empty square).
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally, also onto the en passant square when the pawn that just passed it stands next to it
    """
    moves: list[Position] = []
    direction = pawn_direction(color)

    one_step = position.shifted(direction, 0)
    if one_step.is_within_bounds() and board.piece(one_step) is None:
        moves.append(one_step)

        two_steps = position.shifted(2 * direction, 0)
        if position.row == pawn_start_row(color) and board.piece(two_steps) is None:
            moves.append(two_steps)

    for d_col in (-1, 1):
        target = position.shifted(direction, d_col)
        if not target.is_within_bounds():
            continue

        piece_found = board.piece(target)
        if piece_found is not None and piece_found.color != color:
            moves.append(target)
        elif target == context.en_passant_target:
            victim = board.piece(en_passant_victim_square(position, target))
            if victim == Piece(PieceType.PAWN, color.opponent):
                moves.append(target)
    return moves


def candidate_knight_moves(
    position: Position, board: Board, color: Color, context: MoveContext
) -> list[Position]:
    """Knights always jump such that |delta_row| + |delta_col| = 3"""
    return single_step_move(position, board, color, KNIGHT_DELTAS)


def candidate_bishop_moves(
    position: Position, board: Board, color: Color, context: MoveContext
) -> list[Position]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(position, board, color, DIAGONALS)


def candidate_rook_moves(
    position: Position, board: Board, color: Color, context: MoveContext
) -> list[Position]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(position, board, color, STRAIGHTS)


def candidate_queen_moves(
    position: Position, board: Board, color: Color, context: MoveContext
) -> list[Position]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    horizontal_and_vertical_moves = candidate_rook_moves(position, board, color, context)
    diagonal_moves = candidate_bishop_moves(position, board, color, context)
    return horizontal_and_vertical_moves + diagonal_moves


def candidate_king_moves(
    position: Position, board: Board, color: Color, context: MoveContext
) -> list[Position]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move of two files (the rook is moved along by the move applier).
    """
    moves = single_step_move(position, board, color, KING_DELTAS)
    moves.extend(candidate_castling_moves(position, board, color, context.castling_rights))
    return moves


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Position, Board, Color, MoveContext], list[Position]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def moves_for(
    board: Board,
    position: Position,
    piece: Piece,
    castling_rights: CastlingRights,
    en_passant_target: Optional[Position],
) -> list[Position]:
    """Pseudo-legal destinations of `piece` standing on `position`"""
    movement_rule = MOVEMENT_RULES[piece.type]
    context = MoveContext(castling_rights, en_passant_target)
    return movement_rule(position, board, piece.color, context)


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    position: Position,
    by_color: Color,
    by_piece_types: set[PieceType],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and that
    is allowed to move along the given direction?"_

    ---
    Returns TRUE if the first piece encountered along any direction is of the given color and one of the given types.
    """
    for d_row, d_col in directions:
        target = position.shifted(d_row, d_col)
        while target.is_within_bounds():
            piece_found = board.piece(target)
            if piece_found is not None:
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target = target.shifted(d_row, d_col)
    return False


def single_step_attack(
    position: Position,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """
    The equivalent of raycasting for pawns, kings, and knights that only reach a single step along a direction.
    """
    attacker = Piece(by_piece_type, by_color)
    for d_row, d_col in deltas:
        target = position.shifted(d_row, d_col)
        if target.is_within_bounds() and board.piece(target) == attacker:
            return True
    return False


def is_attacked_by_pawn(position: Position, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn (moving UP the board) could take on the square -->
    look one row DOWN the board. Hence the vectors are opposite to the ones used in `candidate_pawn_moves()`
    """
    backwards = -pawn_direction(by_color)
    return single_step_attack(
        position, by_color, PieceType.PAWN, board, [(backwards, -1), (backwards, 1)]
    )


def is_attacked_by_knight(position: Position, by_color: Color, board: Board) -> bool:
    return single_step_attack(position, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(position: Position, by_color: Color, board: Board) -> bool:
    return raycasting_attack(position, by_color, {PieceType.BISHOP}, board, DIAGONALS)


def is_attacked_by_rook(position: Position, by_color: Color, board: Board) -> bool:
    return raycasting_attack(position, by_color, {PieceType.ROOK}, board, STRAIGHTS)


def is_attacked_by_queen(position: Position, by_color: Color, board: Board) -> bool:
    return raycasting_attack(
        position, by_color, {PieceType.QUEEN}, board, STRAIGHTS + DIAGONALS
    )


def is_attacked_by_king(position: Position, by_color: Color, board: Board) -> bool:
    return single_step_attack(position, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Position, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}


def is_square_attacked(position: Position, by_color: Color, board: Board) -> bool:
    """Could any piece of `by_color` capture on this square (castling never captures, so it plays no part)"""
    return any(rule(position, by_color, board) for rule in ATTACK_RULES.values())


# -- CASTLING MOVES ---
def candidate_castling_moves(
    position: Position, board: Board, color: Color, castling_rights: CastlingRights
) -> list[Position]:
    """
    Castling destinations of the king
    ---

    **you are allowed to castle if**

    * Castling rights are not yet revoked (and king + rook still stand on their home squares).
    * All squares in between the king and the rook are empty.
    * You are not currently in check (you cannot castle out of check).
    * The king does not cross or land on a square that is under attack.
    """
    opponent_color = color.opponent
    own_rook = Piece(PieceType.ROOK, color)
    moves: list[Position] = []
    for direction in castling_directions(color):
        if not castling_rights.has(direction):
            continue

        squares = CASTLING_RULES[direction]
        if position != squares.king_from or board.piece(squares.rook_from) != own_rook:
            continue

        if any(board.piece(square) is not None for square in squares.squares_between()):
            continue

        if is_square_attacked(squares.king_from, opponent_color, board):
            return []

        if any(
            is_square_attacked(square, opponent_color, board)
            for square in squares.king_path()
        ):
            continue

        moves.append(squares.king_to)
    return moves
