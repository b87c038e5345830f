"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from src.core.exceptions import InvalidRequestError
from src.core.shared_types import LobbyStatus

PlayerName = str


def _not_blank(value: str, field: Optional[str]) -> str:
    # Empty strings are already rejected by min_length; this catches whitespace-only names/IDs
    if not value.strip():
        raise InvalidRequestError(f"{field} must not be empty or whitespace.")
    return value


# --- REQUEST BODIES (what the client sends) ---
class CreateLobbyRequest(BaseModel):
    lobby_id: str = Field(min_length=1)
    player_name: PlayerName = Field(min_length=1)
    game_state: str = Field(min_length=1)
    current_turn: Optional[str] = None

    @field_validator("lobby_id", "player_name")
    @classmethod
    def validate_not_blank(cls, value: str, info: ValidationInfo) -> str:
        return _not_blank(value, info.field_name)


class JoinLobbyBody(BaseModel):
    player_name: PlayerName = Field(min_length=1)

    @field_validator("player_name")
    @classmethod
    def validate_not_blank(cls, value: str, info: ValidationInfo) -> str:
        return _not_blank(value, info.field_name)


class UpdateLobbyBody(BaseModel):
    game_state: str = Field(min_length=1)
    current_turn: str = Field(min_length=1)


# --- SERVICE REQUESTS (body + lobby_id taken from the path) ---
class JoinLobbyRequest(JoinLobbyBody):
    lobby_id: str


class UpdateLobbyRequest(UpdateLobbyBody):
    lobby_id: str


class GetLobbyRequest(BaseModel):
    lobby_id: str


class DeleteLobbyRequest(BaseModel):
    lobby_id: str


# --- RESPONSE MODELS ---
class CreateLobbyResponse(BaseModel):
    lobby_id: str
    status: LobbyStatus


class LobbyResponse(BaseModel):
    lobby_id: str
    host_name: PlayerName
    guest_name: Optional[PlayerName]
    game_state: str
    current_turn: str
    status: LobbyStatus
    created_at: int
    updated_at: int


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str
