"""
Orchestration between the presentation layer and the rules core.

The rules core only knows immutable game states. Everything the UI needs on top of that lives here:
the selected square and its highlighted moves, the list of played moves in notation, and the
stack of earlier snapshots used for undo.
"""

from typing import Optional

from src.api.models import (
    GameResponse,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    SelectionResponse,
    SelectSquareRequest,
)
from src.chess.game import GameState, apply_move
from src.chess.notation import notation_to_position, position_to_notation
from src.chess.square import Position
from src.core.exceptions import GameStateError, IllegalMoveError
from src.core.logger import get_logger

logger = get_logger(__name__)


class ChessService:
    """A single game session: current state + everything needed to undo it."""

    def __init__(self, state: Optional[GameState] = None) -> None:
        self.state = state if state is not None else GameState.initial()
        self.snapshots: list[GameState] = []
        self.move_history: list[str] = []
        self.selected_square: Optional[Position] = None
        self.valid_moves: list[Position] = []

    # -- UI actions ---
    def new_game(self) -> GameResponse:
        """Start over from the standard starting position."""
        self.state = GameState.initial()
        self.snapshots.clear()
        self.move_history.clear()
        self._clear_selection()
        logger.info("New game started.")
        return self.get_game_state()

    def get_game_state(self) -> GameResponse:
        return GameResponse.from_state(
            self.state, self.move_history, can_undo=bool(self.snapshots)
        )

    def select_square(self, request: SelectSquareRequest) -> SelectionResponse:
        """
        Click on a square
        ----

        * your own piece: select it and highlight its legal moves
        * the selected square again: deselect
        * a highlighted square: play the move (a pawn reaching the last rank promotes into the default piece)
        * anything else: deselect
        """
        position = notation_to_position(request.square)
        piece = self.state.board.piece(position)

        if self.selected_square is not None:
            if position == self.selected_square:
                self._clear_selection()
                return self._selection_response()

            if position in self.valid_moves:
                response = self.make_move(
                    MoveRequest(
                        from_square=position_to_notation(self.selected_square),
                        to_square=request.square,
                    )
                )
                return self._selection_response(move_played=response.move_history[-1])

        if (
            piece is not None
            and piece.color == self.state.current_player
            and not self.state.is_game_over
        ):
            self.selected_square = position
            self.valid_moves = self.state.legal_moves_for(position)
        else:
            self._clear_selection()
        return self._selection_response()

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Legal moves of the player to move: of the piece on one square, or of all their pieces."""
        if request.square is None:
            moves = self.state.all_legal_moves()
        else:
            position = notation_to_position(request.square)
            piece = self.state.board.piece(position)
            own_piece = piece is not None and piece.color == self.state.current_player
            destinations = (
                self.state.legal_moves_for(position)
                if own_piece and not self.state.is_game_over
                else []
            )
            moves = {position: destinations} if destinations else {}

        return LegalMovesResponse(
            color=self.state.current_player,
            legal_moves={
                position_to_notation(origin): [
                    position_to_notation(target) for target in targets
                ]
                for origin, targets in moves.items()
            },
        )

    def make_move(self, request: MoveRequest) -> GameResponse:
        """Make a move attempt. Illegal moves are rejected and leave the session untouched."""
        from_square = notation_to_position(request.from_square)
        to_square = notation_to_position(request.to_square)

        try:
            new_state = apply_move(self.state, from_square, to_square, request.promote_to)
        except IllegalMoveError as err:
            logger.info("Rejected move %s-%s: %s", from_square, to_square, err)
            raise

        # keep the state before the move around for undo
        self.snapshots.append(self.state)
        self.state = new_state
        assert new_state.last_move is not None
        self.move_history.append(new_state.last_move.to_notation())
        self._clear_selection()

        logger.info("Move %d: %s", len(self.move_history), self.move_history[-1])
        if new_state.is_game_over:
            logger.info("Game over: %s", new_state.status)
        return self.get_game_state()

    def undo(self) -> GameResponse:
        """Restore the snapshot from before the last move."""
        if not self.snapshots:
            raise GameStateError("There is no move to undo.")

        self.state = self.snapshots.pop()
        undone = self.move_history.pop()
        self._clear_selection()
        logger.info("Undid %s", undone)
        return self.get_game_state()

    # -- Internal helpers --
    def _clear_selection(self) -> None:
        self.selected_square = None
        self.valid_moves = []

    def _selection_response(self, move_played: Optional[str] = None) -> SelectionResponse:
        return SelectionResponse(
            selected_square=(
                position_to_notation(self.selected_square)
                if self.selected_square is not None
                else None
            ),
            valid_moves=[position_to_notation(move) for move in self.valid_moves],
            move_played=move_played,
        )
