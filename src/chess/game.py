"""
The game state and the state transition.

A GameState is a snapshot: it is created once at the start of the game and afterwards only
replaced wholesale by `apply_move()`. Nothing mutates a GameState in place, so callers can keep old
snapshots around (undo, speculative analysis) for free.
"""

from dataclasses import dataclass
from typing import Optional, Self

from src.chess.board import Board
from src.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
    castling_direction_for_king_move,
)
from src.chess.moves import en_passant_victim_square, pawn_start_row, promotion_row
from src.chess.notation import move_to_notation
from src.chess.pieces import PIECE_TO_FEN, Piece
from src.chess.rules import (
    all_legal_moves,
    is_checkmate,
    is_in_check,
    is_stalemate,
    legal_moves_for,
)
from src.chess.square import Position
from src.core.config import get_settings
from src.core.exceptions import (
    EmptySquareError,
    GameOverError,
    IllegalMoveError,
    InvalidPromotionError,
    NotYourTurnError,
)
from src.core.logger import get_logger
from src.core.shared_types import PROMOTION_OPTIONS, Color, GameStatus, PieceType

logger = get_logger(__name__)


@dataclass(frozen=True)
class MoveRecord:
    """What happened during a move. By-product of `apply_move()`, used for history/notation."""

    piece: Piece
    from_square: Position
    to_square: Position
    captured: Optional[Piece] = None
    promotion: Optional[PieceType] = None
    castling: Optional[CastlingDirection] = None
    is_en_passant: bool = False
    gives_check: bool = False
    is_checkmate: bool = False

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def to_notation(self) -> str:
        return move_to_notation(self)

    def to_uci(self) -> str:
        """<from_square><to_square>[promotion letter], ex. 'e7e8q'"""
        promotion = PIECE_TO_FEN[self.promotion] if self.promotion else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{promotion}"


@dataclass(frozen=True)
class GameState:
    board: Board
    current_player: Color
    castling_rights: CastlingRights
    en_passant_target: Optional[Position]
    in_check: bool
    status: GameStatus
    move_number: int = 1
    last_move: Optional[MoveRecord] = None
    captured: tuple[Piece, ...] = ()

    @classmethod
    def initial(cls) -> Self:
        """Standard starting position, white to move"""
        return cls(
            board=Board.initial(),
            current_player=Color.WHITE,
            castling_rights=CastlingRights(),
            en_passant_target=None,
            in_check=False,
            status=GameStatus.PLAYING,
        )

    @classmethod
    def from_board(
        cls,
        board: Board,
        current_player: Color = Color.WHITE,
        castling_rights: Optional[CastlingRights] = None,
        en_passant_target: Optional[Position] = None,
    ) -> Self:
        """Set up an arbitrary position: check flag and status are derived from the board."""
        rights = castling_rights if castling_rights is not None else CastlingRights.none()
        return cls(
            board=board,
            current_player=current_player,
            castling_rights=rights,
            en_passant_target=en_passant_target,
            in_check=is_in_check(board, current_player),
            status=_classify(board, current_player, rights, en_passant_target),
        )

    @property
    def is_game_over(self) -> bool:
        return self.status != GameStatus.PLAYING

    @property
    def winner(self) -> Optional[Color]:
        """Only checkmate has a winner: the player that just delivered it."""
        if self.status != GameStatus.CHECKMATE:
            return None
        return self.current_player.opponent

    def legal_moves_for(self, position: Position) -> list[Position]:
        """Legal destinations of the piece standing on `position` (empty for an empty square)"""
        piece = self.board.piece(position)
        if piece is None:
            return []
        return legal_moves_for(
            self.board, position, piece, self.castling_rights, self.en_passant_target
        )

    def all_legal_moves(self) -> dict[Position, list[Position]]:
        """Legal moves of the player to move"""
        if self.is_game_over:
            return {}
        return all_legal_moves(
            self.board, self.current_player, self.castling_rights, self.en_passant_target
        )

    def captured_by(self, color: Color) -> list[Piece]:
        """Pieces the given player took from the opponent"""
        return [piece for piece in self.captured if piece.color != color]


def new_game() -> GameState:
    return GameState.initial()


def apply_move(
    state: GameState,
    from_square: Position,
    to_square: Position,
    promotion: Optional[PieceType] = None,
) -> GameState:
    """
    Play a move and return the state after it
    -----

    1. validate the request (raises an IllegalMoveError subclass, the given state stays untouched)
    2. update the board (NOTE: castling moves the rook too, en passant removes the passed pawn, promotion swaps the pawn)
    3. revoke castling rights / set the en passant target
    4. hand the turn to the opponent, and determine check + game status for them
    """
    piece = _validate_move(state, from_square, to_square, promotion)
    board = state.board
    captured = board.piece(to_square)

    new_board = board.move_piece(from_square, to_square)

    # promotion rule: the pawn reaching the far rank gets swapped
    promoted_to: Optional[PieceType] = None
    if piece.type == PieceType.PAWN and to_square.row == promotion_row(piece.color):
        promoted_to = promotion or get_settings().default_promotion
        new_board = new_board.place_piece(piece.promote_to(promoted_to), to_square)
    elif promotion is not None:
        logger.debug("Ignoring promotion to %s for a non-promoting move.", promotion)

    # castling: the rook jumps over the king
    castling = (
        castling_direction_for_king_move(from_square, to_square)
        if piece.type == PieceType.KING
        else None
    )
    if castling is not None:
        rook_squares = CASTLING_RULES[castling]
        new_board = new_board.move_piece(rook_squares.rook_from, rook_squares.rook_to)

    # en passant: the captured pawn is not on the target square
    is_en_passant = (
        piece.type == PieceType.PAWN
        and to_square == state.en_passant_target
        and captured is None
        and from_square.col != to_square.col
    )
    if is_en_passant:
        victim_square = en_passant_victim_square(from_square, to_square)
        captured = new_board.piece(victim_square)
        new_board = new_board.remove_piece(victim_square)

    castling_rights = _update_castling_rights(
        state.castling_rights, piece, from_square, to_square
    )
    en_passant_target = _determine_en_passant_target(piece, from_square, to_square)

    # NOTE: from here on it is the opponent's turn
    next_player = piece.color.opponent
    in_check = is_in_check(new_board, next_player)
    status = _classify(new_board, next_player, castling_rights, en_passant_target)

    record = MoveRecord(
        piece=piece,
        from_square=from_square,
        to_square=to_square,
        captured=captured,
        promotion=promoted_to,
        castling=castling,
        is_en_passant=is_en_passant,
        gives_check=in_check,
        is_checkmate=status == GameStatus.CHECKMATE,
    )
    logger.debug("%s played %s", piece.color, record.to_notation())
    if status != GameStatus.PLAYING:
        logger.debug("Game ended by %s", status)

    return GameState(
        board=new_board,
        current_player=next_player,
        castling_rights=castling_rights,
        en_passant_target=en_passant_target,
        in_check=in_check,
        status=status,
        move_number=state.move_number + (1 if piece.color == Color.BLACK else 0),
        last_move=record,
        captured=state.captured + ((captured,) if captured is not None else ()),
    )


# -- PRIVATE HELPERS ---
def _validate_move(
    state: GameState,
    from_square: Position,
    to_square: Position,
    promotion: Optional[PieceType],
) -> Piece:
    """Reject anything that is not a legal move for the player to move. Returns the moving piece."""
    if state.is_game_over:
        raise GameOverError(f"Game is not in progress. status: {state.status}")

    piece = state.board.piece(from_square)
    if piece is None:
        raise EmptySquareError(f"There is no piece on {from_square}.")

    if piece.color != state.current_player:
        raise NotYourTurnError(
            f"It is not your turn. Waiting for {state.current_player} to make a move first."
        )

    if promotion is not None and promotion not in PROMOTION_OPTIONS:
        raise InvalidPromotionError(f"A pawn cannot promote into a {promotion}.")

    if to_square not in state.legal_moves_for(from_square):
        raise IllegalMoveError(f"Move not allowed: {from_square}-{to_square}")
    return piece


def _update_castling_rights(
    rights: CastlingRights, piece: Piece, from_square: Position, to_square: Position
) -> CastlingRights:
    """
    Checks which rights should get revoked
    ----

    1. If you are moving your king (castling included) --> revoke both
    2. If a piece leaves a rook's starting square (the rook moving for the first time) --> revoke that direction
    3. If you capture on a rook's starting square --> revoke that direction of your opponent
    """
    if piece.type == PieceType.KING:
        rights = rights.revoke_all(piece.color)
    return rights.revoke_for_square(from_square).revoke_for_square(to_square)


def _determine_en_passant_target(
    piece: Piece, from_square: Position, to_square: Position
) -> Optional[Position]:
    """The square the pawn skipped on its double step, available for exactly one move."""
    is_double_step = (
        piece.type == PieceType.PAWN
        and from_square.row == pawn_start_row(piece.color)
        and abs(to_square.row - from_square.row) == 2
    )
    if not is_double_step:
        return None
    return Position((from_square.row + to_square.row) // 2, from_square.col)


def _classify(
    board: Board,
    color: Color,
    castling_rights: CastlingRights,
    en_passant_target: Optional[Position],
) -> GameStatus:
    if is_checkmate(board, color, castling_rights, en_passant_target):
        return GameStatus.CHECKMATE
    if is_stalemate(board, color, castling_rights, en_passant_target):
        return GameStatus.STALEMATE
    return GameStatus.PLAYING
