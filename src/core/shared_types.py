"""
Type definitions used across layers
"""

from enum import StrEnum

# Side that moves first when the host does not say otherwise
DEFAULT_TURN = "red"


class LobbyStatus(StrEnum):
    WAITING = "waiting"
    PLAYING = "playing"
