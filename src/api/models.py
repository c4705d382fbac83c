"""Requests and Response models exchanged with the presentation layer"""

from typing import Optional, Self

from pydantic import BaseModel, field_validator

from src.chess.game import GameState, MoveRecord
from src.chess.notation import position_to_notation
from src.chess.pieces import Piece
from src.chess.square import Position
from src.core.exceptions import InvalidRequestError, InvalidSquareError
from src.core.shared_types import Color, GameStatus, PieceType

SquareName = str


def _validate_square_name(value: str) -> str:
    """Square names must be in algebraic notation: 'a1' - 'h8'"""
    normalized = value.strip().lower()
    try:
        Position.from_algebraic(normalized)
    except InvalidSquareError as err:
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        ) from err
    return normalized


# --- REQUEST MODELS ---
class SelectSquareRequest(BaseModel):
    square: SquareName

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class LegalMovesRequest(BaseModel):
    """Without a square: the legal moves of all pieces of the player to move"""

    square: Optional[SquareName] = None

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_square_name(value)


class MoveRequest(BaseModel):
    from_square: SquareName
    to_square: SquareName
    promote_to: Optional[PieceType] = None

    @field_validator("from_square", "to_square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[PieceType]) -> Optional[PieceType]:
        if value in (PieceType.KING, PieceType.PAWN):
            raise InvalidRequestError(f"A pawn cannot promote into a {value}.")
        return value


# --- RESPONSE MODELS ---
class PieceModel(BaseModel):
    type: PieceType
    color: Color
    symbol: str

    @classmethod
    def from_piece(cls, piece: Piece) -> Self:
        return cls(type=piece.type, color=piece.color, symbol=piece.symbol)


class MoveRecordModel(BaseModel):
    piece: PieceModel
    from_square: SquareName
    to_square: SquareName
    captured: Optional[PieceModel]
    promotion: Optional[PieceType]
    notation: str
    uci: str

    @classmethod
    def from_record(cls, record: MoveRecord) -> Self:
        return cls(
            piece=PieceModel.from_piece(record.piece),
            from_square=position_to_notation(record.from_square),
            to_square=position_to_notation(record.to_square),
            captured=PieceModel.from_piece(record.captured) if record.captured else None,
            promotion=record.promotion,
            notation=record.to_notation(),
            uci=record.to_uci(),
        )


class GameResponse(BaseModel):
    board: list[list[Optional[PieceModel]]]
    current_player: Color
    status: GameStatus
    in_check: bool
    winner: Optional[Color]
    castling_rights: dict[str, bool]
    en_passant_target: Optional[SquareName]
    move_number: int
    move_history: list[str]
    last_move: Optional[MoveRecordModel]
    captured_pieces: dict[Color, list[PieceModel]]
    material: dict[Color, int]
    can_undo: bool

    @classmethod
    def from_state(
        cls, state: GameState, move_history: list[str], can_undo: bool
    ) -> Self:
        rights = state.castling_rights
        return cls(
            board=[
                [PieceModel.from_piece(piece) if piece else None for piece in row]
                for row in state.board.squares
            ],
            current_player=state.current_player,
            status=state.status,
            in_check=state.in_check,
            winner=state.winner,
            castling_rights={
                "white_king_side": rights.white_king_side,
                "white_queen_side": rights.white_queen_side,
                "black_king_side": rights.black_king_side,
                "black_queen_side": rights.black_queen_side,
            },
            en_passant_target=(
                position_to_notation(state.en_passant_target)
                if state.en_passant_target is not None
                else None
            ),
            move_number=state.move_number,
            move_history=list(move_history),
            last_move=(
                MoveRecordModel.from_record(state.last_move) if state.last_move else None
            ),
            captured_pieces={
                color: [PieceModel.from_piece(piece) for piece in state.captured_by(color)]
                for color in Color
            },
            material=state.board.count_material(),
            can_undo=can_undo,
        )


class SelectionResponse(BaseModel):
    selected_square: Optional[SquareName]
    valid_moves: list[SquareName]
    move_played: Optional[str] = None


class LegalMovesResponse(BaseModel):
    color: Color
    legal_moves: dict[SquareName, list[SquareName]]
