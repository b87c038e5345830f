"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings
from src.db.schema import Base
from src.main import create_app

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


class FakeClock:
    """Deterministic epoch-millisecond clock. Call it to read, advance() to move it forward."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory() -> Generator[sessionmaker[Session], None, None]:
    """Factory handing out sessions on the same test database (for components that open their own sessions)."""
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings for a throwaway file database, logs in the temp dir and no background sweeper."""
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'lobbies.db'}",
        LOG_DIR=str(tmp_path / "logs"),
        SWEEPER_ENABLED=False,
        SSL_KEYFILE=str(tmp_path / "server.key"),
        SSL_CERTFILE=str(tmp_path / "server.cert"),
    )


@pytest.fixture
def client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Full application (lifespan included) served in-process."""
    with TestClient(create_app(test_settings)) as test_client:
        yield test_client
