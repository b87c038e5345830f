"""Application settings, read from the environment (and an optional .env file)."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.shared_types import DEFAULT_TURN


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Application ---
    APP_NAME: str = "Lobby Server"
    VERSION: str = "0.1.0"
    API_PREFIX: str = "/api"

    # --- Server ---
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    SSL_KEYFILE: str = "server.key"
    SSL_CERTFILE: str = "server.cert"
    CORS_ORIGINS: list[str] = ["*"]

    # --- Database ---
    DATABASE_URL: str = "sqlite:///checkers.db"
    SQL_ECHO: bool = False

    # --- Lobby policy ---
    DEFAULT_TURN: str = DEFAULT_TURN
    STALE_AFTER_SECONDS: int = 60 * 60
    SWEEP_INTERVAL_SECONDS: int = 60 * 60
    SWEEPER_ENABLED: bool = True

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "."

    @field_validator("DATABASE_URL")
    @classmethod
    def normalize_postgres_scheme(cls, value: str) -> str:
        # Some hosts hand out postgres://, SQLAlchemy 2.x only knows postgresql://
        if value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql://", 1)
        return value

    @field_validator("STALE_AFTER_SECONDS", "SWEEP_INTERVAL_SECONDS")
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Expiry timings must be positive (seconds).")
        return value


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()
