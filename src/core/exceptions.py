"""
Custom exceptions shared by all layers.

NOTE: an illegal move attempt or an empty square is a normal outcome in this game, reported as a bool / None.
"""


class GameError(Exception):
    """Top level exception of the application. Every other exception should inherit from this one."""


class GameStateError(GameError):
    """The stored state of a game cannot be interpreted (e.g. an unknown status)."""


class KingNotFoundError(GameError):
    """
    Invariant violation: the engine assumes exactly one king per color is on the board.
    Treat as a programming error, never recover from it by guessing a continuation.
    """


class RepositoryError(GameError):
    """Something went wrong fetching/storing a game record."""


class InvalidRequestError(GameError):
    """Request coming from a collaborator (input / rendering / persistence) could not be interpreted."""
