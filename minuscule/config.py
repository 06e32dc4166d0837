"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - ENV=production is the only switch for production-like error verbosity
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - `production` computed here and handed to ErrorReporter explicitly,
      never re-read from the environment per request
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Deployment
    env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("env", "log_format", mode="before")
    @classmethod
    def normalize_case(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def production(self) -> bool:
        return self.env == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
