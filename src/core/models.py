"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and db layer (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer or the API layer from the information needed to send across boundaries)
"""

import time
from dataclasses import dataclass
from typing import Optional

from src.core.shared_types import LobbyStatus

# Type aliases to make LobbyModel easier to read
PlayerName = str
EpochMillis = int


def epoch_millis() -> EpochMillis:
    """Wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


@dataclass
class LobbyModel:
    """Transport-safe representation of a lobby used between API, Service and DB layers."""

    lobby_id: str
    host_name: PlayerName
    game_state: str
    current_turn: str
    created_at: EpochMillis
    updated_at: EpochMillis
    guest_name: Optional[PlayerName] = None

    @property
    def status(self) -> LobbyStatus:
        """Derived from the guest seat, never stored on its own."""
        if self.guest_name is None:
            return LobbyStatus.WAITING
        return LobbyStatus.PLAYING
