"""Unit tests for /src/chess/game.py"""

from typing import Callable
from unittest.mock import patch

import pytest

from src.chess.board import Board
from src.chess.castling import CastlingDirection, CastlingRights
from src.chess.game import GameState, apply_move, new_game
from src.chess.pieces import Piece
from src.chess.rules import is_in_check
from src.chess.square import Position
from src.core.config import Settings
from src.core.exceptions import (
    EmptySquareError,
    GameOverError,
    IllegalMoveError,
    InvalidPromotionError,
    NotYourTurnError,
)
from src.core.shared_types import Color, GameStatus, PieceType

CASTLING_PLACEMENT = "r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R"
PROMOTION_PLACEMENT = "8/P6k/8/8/8/8/8/K7"
STALEMATE_PLACEMENT = "k7/2Q5/1K6/8/8/8/8/8"
FOOLS_MATE_PLACEMENT = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR"
FOOLS_MATE = ["f2f3", "e7e5", "g2g4", "d8h4"]

PlayMovesFn = Callable[..., GameState]


def sq(name: str) -> Position:
    return Position.from_algebraic(name)


@pytest.fixture
def castling_state() -> GameState:
    return GameState.from_board(
        Board.from_placement(CASTLING_PLACEMENT), Color.WHITE, CastlingRights()
    )


@pytest.fixture
def promotion_state() -> GameState:
    return GameState.from_board(Board.from_placement(PROMOTION_PLACEMENT), Color.WHITE)


# --- CREATION ---
def test_initial_state() -> None:
    state = new_game()
    assert state == GameState.initial()
    assert state.current_player == Color.WHITE
    assert state.status == GameStatus.PLAYING
    assert not state.in_check
    assert state.castling_rights == CastlingRights()
    assert state.en_passant_target is None
    assert state.move_number == 1
    assert state.last_move is None
    assert state.winner is None
    assert not state.is_game_over


def test_pawn_moves_from_starting_rank(play_moves: PlayMovesFn) -> None:
    state = new_game()
    assert set(state.legal_moves_for(Position(6, 4))) == {Position(5, 4), Position(4, 4)}

    state = play_moves(state, "e2e4")
    assert state.current_player == Color.BLACK
    assert set(state.legal_moves_for(Position(1, 4))) == {Position(2, 4), Position(3, 4)}


def test_legal_moves_for_empty_square() -> None:
    assert new_game().legal_moves_for(sq("e4")) == []


def test_from_board_detects_stalemate() -> None:
    state = GameState.from_board(Board.from_placement(STALEMATE_PLACEMENT), Color.BLACK)
    assert state.status == GameStatus.STALEMATE
    assert not state.in_check
    assert state.winner is None
    assert state.all_legal_moves() == {}


def test_from_board_detects_checkmate() -> None:
    state = GameState.from_board(Board.from_placement(FOOLS_MATE_PLACEMENT), Color.WHITE)
    assert state.status == GameStatus.CHECKMATE
    assert state.in_check
    assert state.winner == Color.BLACK


# --- PLAYING MOVES ---
def test_apply_move_hands_over_the_turn(play_moves: PlayMovesFn) -> None:
    initial = new_game()
    state = play_moves(initial, "e2e4")
    assert state.board.piece(sq("e4")) == Piece(PieceType.PAWN, Color.WHITE)
    assert state.board.is_empty(sq("e2"))
    assert state.current_player == Color.BLACK
    assert state.en_passant_target == sq("e3")
    # the previous snapshot is untouched
    assert initial == GameState.initial()


def test_move_number_increments_after_black(play_moves: PlayMovesFn) -> None:
    state = play_moves(new_game(), "e2e4")
    assert state.move_number == 1
    state = play_moves(state, "e7e5")
    assert state.move_number == 2


def test_fools_mate(play_moves: PlayMovesFn) -> None:
    state = play_moves(new_game(), *FOOLS_MATE)
    assert state.status == GameStatus.CHECKMATE
    assert state.in_check
    assert state.is_game_over
    assert state.winner == Color.BLACK
    assert state.all_legal_moves() == {}
    assert state.last_move is not None
    assert state.last_move.to_notation() == "Qd8-h4#"


def test_capture_is_recorded(play_moves: PlayMovesFn) -> None:
    state = play_moves(new_game(), "e2e4", "d7d5", "e4d5")
    black_pawn = Piece(PieceType.PAWN, Color.BLACK)
    assert state.captured_by(Color.WHITE) == [black_pawn]
    assert state.captured_by(Color.BLACK) == []
    assert state.last_move is not None
    assert state.last_move.captured == black_pawn
    assert state.last_move.to_notation() == "e4xd5"


@pytest.mark.parametrize(
    "moves",
    [
        ["e2e4", "e7e5", "g1f3", "b8c6", "f1b5", "a7a6", "b5c6", "d7c6"],
        ["d2d4", "e7e6", "c2c4", "f8b4", "b1c3", "d8h4"],
        FOOLS_MATE,
    ],
)
def test_mover_is_never_in_check(play_moves: PlayMovesFn, moves: list[str]) -> None:
    state = new_game()
    for move in moves:
        mover = state.current_player
        state = play_moves(state, move)
        assert not is_in_check(state.board, mover)


# --- EN PASSANT ---
def test_en_passant_capture(play_moves: PlayMovesFn) -> None:
    state = play_moves(new_game(), "a2a3", "e7e5", "a3a4", "e5e4", "d2d4")
    assert state.en_passant_target == Position(5, 3)
    assert sq("d3") in state.legal_moves_for(sq("e4"))

    state = play_moves(state, "e4d3")
    assert state.board.piece(sq("d3")) == Piece(PieceType.PAWN, Color.BLACK)
    assert state.board.is_empty(sq("d4"))
    assert state.board.is_empty(sq("e4"))
    assert state.last_move is not None
    assert state.last_move.is_en_passant
    assert state.last_move.captured == Piece(PieceType.PAWN, Color.WHITE)
    assert state.last_move.to_notation() == "e4xd3"
    assert state.en_passant_target is None


def test_en_passant_expires_after_one_move(play_moves: PlayMovesFn) -> None:
    state = play_moves(
        new_game(), "a2a3", "e7e5", "a3a4", "e5e4", "d2d4", "h7h6", "a4a5"
    )
    assert state.en_passant_target is None
    with pytest.raises(IllegalMoveError):
        play_moves(state, "e4d3")


# --- CASTLING ---
def test_king_side_castling(castling_state: GameState, play_moves: PlayMovesFn) -> None:
    state = play_moves(castling_state, "e1g1")
    assert state.board.piece(sq("g1")) == Piece(PieceType.KING, Color.WHITE)
    assert state.board.piece(sq("f1")) == Piece(PieceType.ROOK, Color.WHITE)
    assert state.board.is_empty(sq("h1"))
    assert state.board.is_empty(sq("e1"))
    assert state.last_move is not None
    assert state.last_move.castling == CastlingDirection.WHITE_KING_SIDE
    assert state.last_move.to_notation() == "O-O"
    assert not state.castling_rights.has_any(Color.WHITE)
    assert state.castling_rights.has_any(Color.BLACK)


def test_queen_side_castling(castling_state: GameState, play_moves: PlayMovesFn) -> None:
    state = play_moves(castling_state, "e1g1", "e8c8")
    assert state.board.piece(sq("c8")) == Piece(PieceType.KING, Color.BLACK)
    assert state.board.piece(sq("d8")) == Piece(PieceType.ROOK, Color.BLACK)
    assert state.board.is_empty(sq("a8"))
    assert state.last_move is not None
    assert state.last_move.to_notation() == "O-O-O"
    assert state.castling_rights == CastlingRights.none()


def test_castling_through_attacked_square_is_illegal(play_moves: PlayMovesFn) -> None:
    """The rook on f2 covers f1: only the queen side is available"""
    state = GameState.from_board(
        Board.from_placement("4k3/8/8/8/8/8/5r2/R3K2R"), Color.WHITE, CastlingRights()
    )
    moves = state.legal_moves_for(sq("e1"))
    assert sq("c1") in moves
    assert sq("g1") not in moves
    with pytest.raises(IllegalMoveError):
        play_moves(state, "e1g1")


def test_rook_move_revokes_one_direction(
    castling_state: GameState, play_moves: PlayMovesFn
) -> None:
    state = play_moves(castling_state, "a1b1")
    rights = state.castling_rights
    assert not rights.white_queen_side
    assert rights.white_king_side
    assert rights.black_king_side and rights.black_queen_side


def test_capture_on_corner_revokes_opponent_right(play_moves: PlayMovesFn) -> None:
    state = GameState.from_board(
        Board.from_placement("r3k2r/8/8/8/8/8/8/R3K2R"), Color.WHITE, CastlingRights()
    )
    state = play_moves(state, "a1a8")
    rights = state.castling_rights
    assert not rights.white_queen_side
    assert not rights.black_queen_side
    assert rights.white_king_side and rights.black_king_side
    assert state.in_check
    assert state.last_move is not None
    assert state.last_move.to_notation() == "Ra1xa8+"


# --- PROMOTION ---
def test_promotion_to_queen(promotion_state: GameState, play_moves: PlayMovesFn) -> None:
    state = play_moves(promotion_state, "a7a8q")
    assert state.board.piece(sq("a8")) == Piece(PieceType.QUEEN, Color.WHITE)
    assert state.last_move is not None
    assert state.last_move.promotion == PieceType.QUEEN
    assert state.last_move.to_notation() == "a7-a8=Q"
    assert state.last_move.to_uci() == "a7a8q"


def test_underpromotion(promotion_state: GameState, play_moves: PlayMovesFn) -> None:
    state = play_moves(promotion_state, "a7a8n")
    assert state.board.piece(sq("a8")) == Piece(PieceType.KNIGHT, Color.WHITE)


@pytest.mark.usefixtures("fresh_settings")
def test_promotion_without_choice_uses_default(
    promotion_state: GameState, play_moves: PlayMovesFn, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("CHESS_DEFAULT_PROMOTION", raising=False)
    state = play_moves(promotion_state, "a7a8")
    assert state.board.piece(sq("a8")) == Piece(PieceType.QUEEN, Color.WHITE)


@pytest.mark.usefixtures("fresh_settings")
def test_promotion_default_from_environment(
    promotion_state: GameState, play_moves: PlayMovesFn, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CHESS_DEFAULT_PROMOTION", "rook")
    state = play_moves(promotion_state, "a7a8")
    assert state.board.piece(sq("a8")) == Piece(PieceType.ROOK, Color.WHITE)


def test_promotion_default_is_read_from_settings(
    promotion_state: GameState, play_moves: PlayMovesFn
) -> None:
    settings = Settings(log_level="WARNING", default_promotion=PieceType.BISHOP)
    with patch("src.chess.game.get_settings", return_value=settings):
        state = play_moves(promotion_state, "a7a8")
    assert state.board.piece(sq("a8")) == Piece(PieceType.BISHOP, Color.WHITE)


def test_promotion_ignored_for_normal_move() -> None:
    state = apply_move(new_game(), sq("e2"), sq("e4"), PieceType.QUEEN)
    assert state.board.piece(sq("e4")) == Piece(PieceType.PAWN, Color.WHITE)
    assert state.last_move is not None
    assert state.last_move.promotion is None


# --- REJECTED MOVES ---
@pytest.mark.parametrize(
    "from_square, to_square, error",
    [
        ("e3", "e4", EmptySquareError),
        ("e7", "e5", NotYourTurnError),
        ("e2", "e5", IllegalMoveError),
        ("g1", "g3", IllegalMoveError),
        ("a1", "a3", IllegalMoveError),
    ],
)
def test_rejected_moves_leave_state_untouched(
    from_square: str, to_square: str, error: type[Exception]
) -> None:
    state = new_game()
    with pytest.raises(error):
        apply_move(state, sq(from_square), sq(to_square))
    assert state == GameState.initial()


def test_rejected_errors_share_a_base() -> None:
    for error in (EmptySquareError, NotYourTurnError, InvalidPromotionError):
        assert issubclass(error, IllegalMoveError)


def test_invalid_promotion_piece(promotion_state: GameState) -> None:
    with pytest.raises(InvalidPromotionError):
        apply_move(promotion_state, sq("a7"), sq("a8"), PieceType.KING)


def test_no_moves_after_game_over(play_moves: PlayMovesFn) -> None:
    state = play_moves(new_game(), *FOOLS_MATE)
    with pytest.raises(GameOverError):
        play_moves(state, "a2a3")


def test_to_uci_for_normal_move(play_moves: PlayMovesFn) -> None:
    state = play_moves(new_game(), "g1f3")
    assert state.last_move is not None
    assert state.last_move.to_uci() == "g1f3"
    assert state.last_move.to_notation() == "Ng1-f3"
