"""Exceptions raised while exploring a maze session."""

from typing import Optional


class ExplorerError(Exception):
    """Base exception for fatal exploration errors.

    Carries the last location the session reported and the number of moves
    issued so far, so an aborted run can be diagnosed.
    """

    def __init__(
        self,
        message: str,
        location_key: Optional[str] = None,
        moves: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.location_key = location_key
        self.moves = moves

    def add_context(self, location_key: Optional[str], moves: int) -> "ExplorerError":
        """Attach run context unless it was already set closer to the failure."""
        if self.location_key is None:
            self.location_key = location_key
        if self.moves is None:
            self.moves = moves
        return self

    def __str__(self) -> str:
        if self.location_key is None and self.moves is None:
            return self.message
        return f"{self.message} (location={self.location_key}, moves={self.moves})"


class TransportError(ExplorerError):
    """The connection could not be used or was lost mid-run."""
    pass


class ProtocolError(ExplorerError):
    """A message was malformed or the request/response pairing was broken."""
    pass


class DesynchronizationError(ExplorerError):
    """The session's position cannot be reconciled with the explorer's stack."""
    pass
