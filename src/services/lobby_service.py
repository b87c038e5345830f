"""Orchestration of communication from API router to the persistence layer (and the reverse direction)."""

import logging
from typing import Callable

from src.api.models import (
    CreateLobbyRequest,
    CreateLobbyResponse,
    DeleteLobbyRequest,
    GetLobbyRequest,
    JoinLobbyRequest,
    LobbyResponse,
    SuccessResponse,
    UpdateLobbyRequest,
)
from src.core.exceptions import LobbyNotFoundError, NotJoinableError
from src.core.models import EpochMillis, LobbyModel, epoch_millis
from src.core.shared_types import DEFAULT_TURN
from src.db.repository import LobbyRepository

logger = logging.getLogger(__name__)


class LobbyService:
    """
    Lifecycle of a lobby: Waiting --join--> Playing --update*--> Playing --delete--> Gone.

    Game state is passed through verbatim; whether a move is legal is for the clients' game rules to decide.
    Updates are last-writer-wins and are accepted in either status.
    """

    def __init__(
        self,
        repository: LobbyRepository,
        clock: Callable[[], EpochMillis] = epoch_millis,
        default_turn: str = DEFAULT_TURN,
    ) -> None:
        self.repo = repository
        self.clock = clock
        self.default_turn = default_turn

    # -- API routes logic ---
    def create_lobby(self, request: CreateLobbyRequest) -> CreateLobbyResponse:
        """Host requested to open a new lobby."""
        now = self.clock()
        new_lobby = LobbyModel(
            lobby_id=request.lobby_id,
            host_name=request.player_name,
            game_state=request.game_state,
            current_turn=request.current_turn or self.default_turn,
            created_at=now,
            updated_at=now,
        )

        # DuplicateLobbyError propagates from the repository untouched
        stored = self.repo.create_lobby(new_lobby)
        logger.info("Lobby %r created by %r", stored.lobby_id, stored.host_name)
        return CreateLobbyResponse(lobby_id=stored.lobby_id, status=stored.status)

    def list_open_lobbies(self) -> list[LobbyResponse]:
        """
        Lobbies still waiting for a guest, newest first.
        ----
        Used by the frontend to browse for a match.
        """
        return [self._create_lobby_response(m) for m in self.repo.list_waiting_lobbies()]

    def join_lobby(self, request: JoinLobbyRequest) -> SuccessResponse:
        """Guest requested to take the second seat."""
        joined = self.repo.join_lobby(request.lobby_id, request.player_name, self.clock())
        if not joined:
            raise NotJoinableError(
                f"Lobby with lobby_id={request.lobby_id!r} is full or not found."
            )
        logger.info("Player %r joined lobby %r", request.player_name, request.lobby_id)
        return SuccessResponse()

    def update_lobby(self, request: UpdateLobbyRequest) -> SuccessResponse:
        """Either player pushes a new game state."""
        updated = self.repo.update_lobby(
            request.lobby_id, request.game_state, request.current_turn, self.clock()
        )
        if not updated:
            raise LobbyNotFoundError(f"Lobby with lobby_id={request.lobby_id!r} not found.")
        logger.info("Lobby %r updated, turn: %r", request.lobby_id, request.current_turn)
        return SuccessResponse()

    def get_lobby(self, request: GetLobbyRequest) -> LobbyResponse:
        """
        Retrieve current lobby state.
        ----
        Used in "polling" loop by frontend to check when the opponent has moved for instance.
        """
        return self._create_lobby_response(self._fetch_lobby(request.lobby_id))

    def delete_lobby(self, request: DeleteLobbyRequest) -> SuccessResponse:
        """Handle a request to delete a lobby. Deleting an unknown lobby is not an error."""
        if self.repo.delete_lobby(request.lobby_id):
            logger.info("Lobby %r deleted", request.lobby_id)
        return SuccessResponse()

    # -- Internal helpers --
    def _create_lobby_response(self, model: LobbyModel) -> LobbyResponse:
        return LobbyResponse(
            lobby_id=model.lobby_id,
            host_name=model.host_name,
            guest_name=model.guest_name,
            game_state=model.game_state,
            current_turn=model.current_turn,
            status=model.status,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _fetch_lobby(self, lobby_id: str) -> LobbyModel:
        """Attempt to find the lobby in the repository and raise error if it fails."""
        lobby_model = self.repo.get_lobby(lobby_id)
        if lobby_model is None:
            raise LobbyNotFoundError(f"Lobby with lobby_id={lobby_id!r} not found.")
        return lobby_model
