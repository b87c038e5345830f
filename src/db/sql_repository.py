"""Implementation of (Lobby)Repository using SQLAlchemy"""

import logging
from typing import NoReturn

from sqlalchemy import case, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import ColumnElement, Executable

from src.core.exceptions import DuplicateLobbyError, RepositoryError
from src.core.models import EpochMillis, LobbyModel
from src.core.shared_types import LobbyStatus
from src.db.schema import DBLobby

logger = logging.getLogger(__name__)


class SQLLobbyRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def create_lobby(self, lobby: LobbyModel) -> LobbyModel:
        """Store a new lobby. Raises DuplicateLobbyError if the ID is taken."""
        # Plain INSERT (not session.add) so a duplicate always surfaces as the primary key violation
        statement = insert(DBLobby).values(
            lobby_id=lobby.lobby_id,
            host_name=lobby.host_name,
            guest_name=lobby.guest_name,
            game_state=lobby.game_state,
            current_turn=lobby.current_turn,
            created_at=lobby.created_at,
            updated_at=lobby.updated_at,
        )
        try:
            self.db.execute(statement)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateLobbyError(
                f"Lobby with lobby_id={lobby.lobby_id!r} already exists."
            ) from exc
        except SQLAlchemyError as exc:
            self._fail("create lobby", exc)
        stored = self.get_lobby(lobby.lobby_id)
        return stored if stored is not None else lobby

    def get_lobby(self, lobby_id: str) -> LobbyModel | None:
        """Get lobby by ID, if record exists."""
        query = (
            select(DBLobby)
            .where(DBLobby.lobby_id == lobby_id)
            .execution_options(populate_existing=True)
        )
        try:
            lobby_db = self.db.scalar(query)
        except SQLAlchemyError as exc:
            self._fail("fetch lobby", exc)
        if lobby_db:
            return self._to_model(lobby_db)
        return None

    def list_waiting_lobbies(self) -> list[LobbyModel]:
        """All lobbies without a guest, most recently created first."""
        query = (
            select(DBLobby)
            .where(DBLobby.status == LobbyStatus.WAITING.value)
            .order_by(DBLobby.created_at.desc())
            .execution_options(populate_existing=True)
        )
        try:
            rows = self.db.scalars(query).all()
        except SQLAlchemyError as exc:
            self._fail("list waiting lobbies", exc)
        return [self._to_model(row) for row in rows]

    def join_lobby(self, lobby_id: str, guest_name: str, now: EpochMillis) -> bool:
        """Fill the guest seat only if it is still empty. True if exactly one record changed."""
        statement = (
            update(DBLobby)
            .where(DBLobby.lobby_id == lobby_id, DBLobby.guest_name.is_(None))
            .values(guest_name=guest_name, updated_at=self._bumped(now))
        )
        return self._execute_write(statement, "join lobby") == 1

    def update_lobby(
        self, lobby_id: str, game_state: str, current_turn: str, now: EpochMillis
    ) -> bool:
        """Overwrite game state and turn. True if exactly one record changed."""
        statement = (
            update(DBLobby)
            .where(DBLobby.lobby_id == lobby_id)
            .values(
                game_state=game_state,
                current_turn=current_turn,
                updated_at=self._bumped(now),
            )
        )
        return self._execute_write(statement, "update lobby") == 1

    def delete_lobby(self, lobby_id: str) -> bool:
        """Remove a lobby's record. True if there was one to remove."""
        statement = delete(DBLobby).where(DBLobby.lobby_id == lobby_id)
        return self._execute_write(statement, "delete lobby") > 0

    def delete_stale_before(self, cutoff: EpochMillis) -> int:
        """Remove every lobby last updated before the cutoff and return how many went."""
        statement = delete(DBLobby).where(DBLobby.updated_at < cutoff)
        return self._execute_write(statement, "delete stale lobbies")

    # -- Internal helpers --
    @staticmethod
    def _bumped(now: EpochMillis) -> ColumnElement[int]:
        """New updated_at: `now`, or one past the stored value when the clock has not moved on since the last write."""
        return case(
            (DBLobby.updated_at >= now, DBLobby.updated_at + 1),
            else_=now,
        )

    def _execute_write(self, statement: Executable, action: str) -> int:
        """Run a single UPDATE/DELETE statement in its own transaction and return the affected row count."""
        try:
            result = self.db.execute(
                statement, execution_options={"synchronize_session": False}
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self._fail(action, exc)
        return result.rowcount

    def _fail(self, action: str, exc: SQLAlchemyError) -> NoReturn:
        self.db.rollback()
        logger.error("Failed to %s: %s", action, exc)
        raise RepositoryError(f"Could not {action}: {exc}") from exc

    def _to_model(self, lobby_db: DBLobby) -> LobbyModel:
        """Convert SQLAlchemy model to data transfer model."""
        return LobbyModel(
            lobby_id=lobby_db.lobby_id,
            host_name=lobby_db.host_name,
            guest_name=lobby_db.guest_name,
            game_state=lobby_db.game_state,
            current_turn=lobby_db.current_turn,
            created_at=lobby_db.created_at,
            updated_at=lobby_db.updated_at,
        )
