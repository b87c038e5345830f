"""REST endpoints for lobbies. Thin glue: build the service request, call the service, return its response."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from src.api.models import (
    CreateLobbyRequest,
    CreateLobbyResponse,
    DeleteLobbyRequest,
    ErrorResponse,
    GetLobbyRequest,
    JoinLobbyBody,
    JoinLobbyRequest,
    LobbyResponse,
    SuccessResponse,
    UpdateLobbyBody,
    UpdateLobbyRequest,
)
from src.core.exceptions import LobbyNotFoundError
from src.db.database import get_db
from src.db.sql_repository import SQLLobbyRepository
from src.services.lobby_service import LobbyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lobbies", tags=["lobbies"])


def get_lobby_service(request: Request, db: Session = Depends(get_db)) -> LobbyService:
    """A service per request, backed by that request's session."""
    return LobbyService(
        SQLLobbyRepository(db),
        default_turn=request.app.state.settings.DEFAULT_TURN,
    )


@router.post(
    "",
    response_model=CreateLobbyResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_lobby(
    body: CreateLobbyRequest, service: LobbyService = Depends(get_lobby_service)
) -> CreateLobbyResponse:
    return service.create_lobby(body)


@router.get("", response_model=list[LobbyResponse])
def list_open_lobbies(
    service: LobbyService = Depends(get_lobby_service),
) -> list[LobbyResponse]:
    return service.list_open_lobbies()


@router.post(
    "/{lobby_id}/join",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
)
def join_lobby(
    lobby_id: str,
    body: JoinLobbyBody,
    service: LobbyService = Depends(get_lobby_service),
) -> SuccessResponse:
    return service.join_lobby(
        JoinLobbyRequest(lobby_id=lobby_id, player_name=body.player_name)
    )


@router.put("/{lobby_id}", response_model=SuccessResponse)
def update_lobby(
    lobby_id: str,
    body: UpdateLobbyBody,
    service: LobbyService = Depends(get_lobby_service),
) -> SuccessResponse:
    request = UpdateLobbyRequest(
        lobby_id=lobby_id, game_state=body.game_state, current_turn=body.current_turn
    )
    try:
        return service.update_lobby(request)
    except LobbyNotFoundError:
        # Clients treat the update as fire-and-forget: an unknown ID is not reported back.
        logger.warning("Update for unknown lobby %r ignored", lobby_id)
        return SuccessResponse()


@router.get(
    "/{lobby_id}",
    response_model=LobbyResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_lobby(
    lobby_id: str, service: LobbyService = Depends(get_lobby_service)
) -> LobbyResponse:
    return service.get_lobby(GetLobbyRequest(lobby_id=lobby_id))


@router.delete("/{lobby_id}", response_model=SuccessResponse)
def delete_lobby(
    lobby_id: str, service: LobbyService = Depends(get_lobby_service)
) -> SuccessResponse:
    return service.delete_lobby(DeleteLobbyRequest(lobby_id=lobby_id))
