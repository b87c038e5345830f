"""
Background garbage collection of idle lobbies.

The sweeper talks to the repository directly: it only ever deletes, whatever the lobby's status.
"""

import logging
import threading
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.core.models import EpochMillis, epoch_millis
from src.db.repository import LobbyRepository
from src.db.sql_repository import SQLLobbyRepository

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Every `interval_seconds`, delete lobbies not updated in the last `stale_after_seconds`."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        stale_after_seconds: int = 3600,
        interval_seconds: float = 3600,
        clock: Callable[[], EpochMillis] = epoch_millis,
        repository_factory: Callable[[Session], LobbyRepository] = SQLLobbyRepository,
    ) -> None:
        self.session_factory = session_factory
        self.stale_after_ms = stale_after_seconds * 1000
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.repository_factory = repository_factory
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def sweep_once(self) -> int:
        """
        Run a single sweep and return the number of lobbies removed.

        A failed sweep is logged and reported as 0. Nothing is retried; the next tick simply tries again.
        """
        cutoff = self.clock() - self.stale_after_ms
        db = self.session_factory()
        try:
            removed = self.repository_factory(db).delete_stale_before(cutoff)
        except (RepositoryError, SQLAlchemyError) as exc:
            logger.error("Expiry sweep failed (cutoff=%d): %s", cutoff, exc)
            return 0
        finally:
            db.close()
        if removed:
            logger.info("Expiry sweep removed %d stale lobbies", removed)
        return removed

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="lobby-expiry-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(
            "Expiry sweeper started (every %ss, stale after %ds)",
            self.interval_seconds,
            self.stale_after_ms // 1000,
        )

    def stop(self, timeout: float | None = None) -> None:
        """Ask the loop to end. A sweep already in progress finishes first."""
        self._stop.set()
        if self._thread is None:
            return
        self._thread.join(timeout)
        self._thread = None
        logger.info("Expiry sweeper stopped")

    def _run(self) -> None:
        # wait() returns True as soon as stop() is called
        while not self._stop.wait(self.interval_seconds):
            self.sweep_once()
