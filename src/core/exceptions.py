"""
Exceptions shared across layers.

Every error raised on purpose by the service or repository derives from LobbyError,
so the API layer can translate the whole family into responses in one place.
"""


class LobbyError(Exception):
    """Top-level exception for anything related to lobby handling."""


class InvalidRequestError(LobbyError):
    """Required fields missing or malformed. Raised before the store is touched."""


class DuplicateLobbyError(LobbyError):
    """A lobby with the requested ID already exists."""


class NotJoinableError(LobbyError):
    """Lobby does not exist, or already has a guest."""


class LobbyNotFoundError(LobbyError):
    """No lobby recorded under the requested ID."""


class RepositoryError(LobbyError):
    """Underlying storage failed (unavailable, constraint, driver error, ...)."""
