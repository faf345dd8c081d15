"""Custom exceptions. Every layer raises these, so the service (and whatever sits above it) only needs to know about `GameError`."""

from src.core.shared_types import Disk


class GameError(Exception):
    """Top-level exception for anything that went wrong while playing a game."""


class GameStateError(GameError):
    """The game is in a state that does not accept the requested action (finished, pass pending, ...)."""


class NotYourTurnError(GameError):
    """The side to move is not controlled by whoever made the request."""


class DiskPlacementError(GameError):
    """The disk cannot be placed on the requested cell. Board and turn are left untouched."""

    def __init__(self, disk: Disk, x: int, y: int) -> None:
        super().__init__(f"Cannot place a {disk} disk at ({x}, {y}).")
        self.disk = disk
        self.x = x
        self.y = y


class InvalidNotationError(GameError):
    """A board / turn / player code could not be parsed."""


class PersistenceError(GameError):
    """Saving or loading a game failed."""


class RepositoryError(PersistenceError):
    """The storage behind a repository failed (database errors and the like)."""


class InvalidRequestError(GameError):
    """Request data does not make sense (raised during validation of the API models)."""


class OutOfBoundsError(IndexError):
    """Writing outside of the board. This is a bug in the caller, not something a player can trigger."""
