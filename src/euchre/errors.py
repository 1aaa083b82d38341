"""Exceptions raised by the euchre engine."""


class GameError(Exception):
    """Base exception for game errors."""
    pass


class InvalidMoveError(GameError):
    """Raised when a player makes an invalid move."""
    pass


class InvalidPhaseError(GameError):
    """Raised when an action is attempted in the wrong phase."""
    pass


class DealError(GameError):
    """Raised when a deck cannot supply a full deal."""
    pass


class EmptyTrickError(RuntimeError):
    """Resolving an empty trick: a caller bug, never a game situation."""
    pass
