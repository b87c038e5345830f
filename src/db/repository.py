"""Protocol repository (SQLAlchemy implementation in sql_repository.py, in-memory mock in the tests)"""

from typing import Protocol

from src.core.models import EpochMillis, LobbyModel


class LobbyRepository(Protocol):
    """
    Persistence layer orchestration.

    Every method is atomic for the row(s) it touches. Concurrency guarantees (unique IDs, a single successful join)
    come from the storage itself, not from locks held by the caller.
    """

    def create_lobby(self, lobby: LobbyModel) -> LobbyModel:
        """Store a new lobby. Raises DuplicateLobbyError if the ID is taken."""
        ...

    def get_lobby(self, lobby_id: str) -> LobbyModel | None:
        """Get lobby by ID, if record exists."""
        ...

    def list_waiting_lobbies(self) -> list[LobbyModel]:
        """All lobbies without a guest, most recently created first."""
        ...

    def join_lobby(self, lobby_id: str, guest_name: str, now: EpochMillis) -> bool:
        """Fill the guest seat only if it is still empty. True if exactly one record changed."""
        ...

    def update_lobby(
        self, lobby_id: str, game_state: str, current_turn: str, now: EpochMillis
    ) -> bool:
        """Overwrite game state and turn. True if exactly one record changed."""
        ...

    def delete_lobby(self, lobby_id: str) -> bool:
        """Remove a lobby's record. True if there was one to remove."""
        ...

    def delete_stale_before(self, cutoff: EpochMillis) -> int:
        """Remove every lobby last updated before the cutoff and return how many went."""
        ...
