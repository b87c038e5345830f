"""Generate database engine and sessions"""

from typing import Any, Generator

from fastapi import Request
from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings
from src.db.schema import Base


def build_engine(settings: Settings) -> Engine:
    """Create the engine for the configured DATABASE_URL."""
    url = settings.DATABASE_URL
    kwargs: dict[str, Any] = {"echo": settings.SQL_ECHO}
    if url.startswith("sqlite"):
        # Requests run on a threadpool, so connections must be shareable across threads
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # An in-memory database only exists inside its one connection
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False)


def init_db(engine: Engine) -> None:
    """Ensure all tables are created"""
    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """One session per request, taken from the factory the app was built with."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
