"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - DATABASE_URL, PORT and API_KEYS have no defaults: startup fails without them
    - API_KEYS is a comma-separated list with at least one non-blank key
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - api_keys kept as the raw comma-separated string; api_key_set is the parsed,
      frozen view handed to the access gate
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str
    database_user: str | None = None
    database_password: str | None = None
    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Server
    host: str = "0.0.0.0"
    port: int = Field(ge=1, le=65535)

    # Access gate
    api_keys: str
    update_allowed_fields_only: bool = False

    @field_validator("api_keys")
    @classmethod
    def require_at_least_one_key(cls, v: str) -> str:
        if not [key for key in v.split(",") if key.strip()]:
            raise ValueError("API_KEYS must contain at least one key")
        return v

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def api_key_set(self) -> frozenset[str]:
        return frozenset(
            key.strip() for key in self.api_keys.split(",") if key.strip()
        )

    @property
    def sqlalchemy_url(self) -> str:
        return resolve_database_url(
            self.database_url, self.database_user, self.database_password,
        )


def resolve_database_url(
    database_url: str, user: str | None = None, password: str | None = None,
) -> str:
    """Async driver URL with credentials merged in, when given."""
    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    url = make_url(database_url)
    if user:
        url = url.set(username=user)
    if password:
        url = url.set(password=password)
    return url.render_as_string(hide_password=False)


@lru_cache
def get_settings() -> Settings:
    return Settings()
