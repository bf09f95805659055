import logging
import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Look for .env in project root (parent of flightpoints/)
_env_file = Path(__file__).resolve().parent.parent.parent / ".env"

_DEFAULT_POSTGRES_PASSWORD = "postgres"  # nosec B105


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=_env_file, extra="ignore")

    # Environment
    env: Literal["development", "production"] = "development"

    # Server
    backend_port: int = 3000
    frontend_port: int = 8095

    # Cache duration in days; searches older than this are stale and get cleaned up
    cache_duration_days: int = 5

    # Storage engine: embedded SQLite file or PostgreSQL server
    db_type: Literal["sqlite", "postgres"] = "sqlite"
    db_path: str = "./data/flights.db"

    # PostgreSQL connection parts (ignored when DATABASE_URL is set)
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = _DEFAULT_POSTGRES_PASSWORD
    postgres_db: str = "flight_points_db"

    # Full connection string - supports postgres://, postgresql://, or postgresql+psycopg://
    database_url: str = ""

    @property
    def postgres_url(self) -> str:
        """Return the PostgreSQL URL with the psycopg driver for SQLAlchemy."""
        url = self.database_url
        if not url:
            url = (
                f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}"
                f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
            )
        # Convert postgres:// or postgresql:// to postgresql+psycopg://
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+psycopg://", 1)
        elif url.startswith("postgresql://") and "+psycopg" not in url:
            url = url.replace("postgresql://", "postgresql+psycopg://", 1)
        return url

    @property
    def cors_origins(self) -> list[str]:
        return [f"http://localhost:{self.frontend_port}", f"http://localhost:{self.backend_port}"]

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def validate_settings(settings: Settings) -> None:
    """Validate required settings and print helpful error messages."""
    errors = []

    if settings.cache_duration_days < 1:
        errors.append(
            f"CACHE_DURATION_DAYS must be at least 1 (got {settings.cache_duration_days})"
        )

    if settings.db_type == "postgres" and not settings.database_url:
        if settings.postgres_password == _DEFAULT_POSTGRES_PASSWORD:
            if settings.is_production:
                errors.append("POSTGRES_PASSWORD must be changed from the default in production")
            else:
                logging.warning(
                    "POSTGRES_PASSWORD is using the default value. Set a unique password."
                )

    if errors:
        for error in errors:
            logging.error("Configuration error: %s", error)
        sys.exit(1)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    validate_settings(settings)
    return settings
