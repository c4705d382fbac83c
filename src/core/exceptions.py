"""Custom errors raised by the rules core and the layers on top of it."""


class ChessError(Exception):
    """Base class: catch this to handle anything the chess package rejects."""


# --- MOVES ---
class IllegalMoveError(ChessError):
    """The requested move is not in the legal move set of the current position."""


class EmptySquareError(IllegalMoveError):
    """Tried to move from a square without a piece on it."""


class NotYourTurnError(IllegalMoveError):
    """Tried to move a piece of the player that is not on move."""


class InvalidPromotionError(IllegalMoveError):
    """A pawn can only promote into a queen, rook, bishop or knight."""


# --- GAME STATE ---
class GameStateError(ChessError):
    """The game is not in a state where the request makes sense."""


class GameOverError(GameStateError):
    """The game already ended by checkmate or stalemate."""


# --- INPUT ---
class InvalidSquareError(ChessError, ValueError):
    """Square name cannot be interpreted as algebraic notation ('a1' - 'h8')."""


class InvalidRequestError(ChessError):
    """Request data failed validation at the boundary (raised from within the pydantic validators)."""
