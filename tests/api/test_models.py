"""Unit tests for src/api/models.py"""

import pytest
from pydantic import ValidationError

from src.api.models import (
    CreateLobbyRequest,
    JoinLobbyBody,
    LobbyResponse,
    UpdateLobbyBody,
)
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import LobbyStatus


# -- Validation - CreateLobbyRequest --
def test_current_turn_is_optional() -> None:
    request = CreateLobbyRequest(lobby_id="L1", player_name="Alice", game_state="{}")
    assert request.current_turn is None


def test_game_state_is_kept_verbatim() -> None:
    """Opaque payload: whitespace and all."""
    payload = '  {"board": [[0, 1], [1, 0]]}\n'
    request = CreateLobbyRequest(lobby_id="L1", player_name="Alice", game_state=payload)
    assert request.game_state == payload


@pytest.mark.parametrize("missing", ["lobby_id", "player_name", "game_state"])
def test_missing_required_field(missing: str) -> None:
    data = {"lobby_id": "L1", "player_name": "Alice", "game_state": "{}"}
    del data[missing]
    with pytest.raises(ValidationError):
        CreateLobbyRequest(**data)


@pytest.mark.parametrize("field", ["lobby_id", "player_name", "game_state"])
def test_empty_required_field(field: str) -> None:
    data = {"lobby_id": "L1", "player_name": "Alice", "game_state": "{}"}
    data[field] = ""
    with pytest.raises(ValidationError):
        CreateLobbyRequest(**data)


@pytest.mark.parametrize(
    "field, value",
    [
        ("lobby_id", "   "),
        ("player_name", "\t"),
        ("player_name", " \n "),
    ],
)
def test_whitespace_only_field(field: str, value: str) -> None:
    """Blank IDs and names are rejected with the project's own InvalidRequestError."""
    data = {"lobby_id": "L1", "player_name": "Alice", "game_state": "{}"}
    data[field] = value
    with pytest.raises(InvalidRequestError, match=field):
        CreateLobbyRequest(**data)


# -- Validation - join / update bodies --
def test_join_requires_player_name() -> None:
    with pytest.raises(ValidationError):
        JoinLobbyBody()  # type: ignore[call-arg]
    with pytest.raises(InvalidRequestError):
        JoinLobbyBody(player_name=" ")


def test_update_requires_state_and_turn() -> None:
    with pytest.raises(ValidationError):
        UpdateLobbyBody(game_state="{}")  # type: ignore[call-arg]
    with pytest.raises(ValidationError):
        UpdateLobbyBody(current_turn="red")  # type: ignore[call-arg]
    body = UpdateLobbyBody(game_state="{}", current_turn="red")
    assert body.current_turn == "red"


def test_lobby_response_serializes_status_as_string() -> None:
    response = LobbyResponse(
        lobby_id="L1",
        host_name="Alice",
        guest_name=None,
        game_state="{}",
        current_turn="red",
        status=LobbyStatus.WAITING,
        created_at=1,
        updated_at=1,
    )
    assert response.model_dump(mode="json")["status"] == "waiting"
