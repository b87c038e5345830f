"""Database tables / schema"""

from typing import Optional

from sqlalchemy import BigInteger, String, Text, case
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.expression import ColumnElement

from src.core.shared_types import LobbyStatus


class Base(DeclarativeBase):
    pass


class DBLobby(Base):
    __tablename__ = "lobbies"
    lobby_id: Mapped[str] = mapped_column(String, primary_key=True)
    host_name: Mapped[str] = mapped_column(String)
    guest_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    game_state: Mapped[str] = mapped_column(Text)
    current_turn: Mapped[str] = mapped_column(String)
    # epoch milliseconds
    created_at: Mapped[int] = mapped_column(BigInteger, index=True)
    updated_at: Mapped[int] = mapped_column(BigInteger, index=True)

    # Status is a projection of the guest seat. No column to keep in sync.
    @hybrid_property
    def status(self) -> str:
        if self.guest_name is None:
            return LobbyStatus.WAITING.value
        return LobbyStatus.PLAYING.value

    @status.inplace.expression
    @classmethod
    def _status_expression(cls) -> ColumnElement[str]:
        return case(
            (cls.guest_name.is_(None), LobbyStatus.WAITING.value),
            else_=LobbyStatus.PLAYING.value,
        )
