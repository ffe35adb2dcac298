"""Application configuration settings."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_database_url() -> str:
    """Get the default database URL, using a mounted volume path if available."""
    if os.path.isdir("/data"):
        return "sqlite:////data/billtracker.db"
    return "sqlite:///./billtracker.db"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    PROJECT_NAME: str = "Bill Tracker"
    VERSION: str = "0.1.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database - defaults to volume path if /data exists
    DATABASE_URL: str = _get_default_database_url()

    # Sessions and bearer tokens
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    SESSION_COOKIE: str = "billtracker_session"
    SIGN_IN_PATH: str = "/auth/sign-in"

    # Logging
    LOG_LEVEL: str = "INFO"

    BILLS_PAGE_DEFAULT_LIMIT: int = 24


settings = Settings()
