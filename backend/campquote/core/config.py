"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = Field("Camp Quote Engine", alias="APP_NAME")
    api_v1_prefix: str = Field("/api/v1", alias="API_V1_PREFIX")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")
    store_backend: Literal["sql", "memory"] = Field("sql", alias="STORE_BACKEND")

    lock_timeout_seconds: float = Field(2.0, alias="LOCK_TIMEOUT_SECONDS", gt=0)
    reserve_max_attempts: int = Field(3, alias="RESERVE_MAX_ATTEMPTS", ge=1)
    reserve_retry_backoff_seconds: float = Field(
        0.05, alias="RESERVE_RETRY_BACKOFF_SECONDS", ge=0
    )
    rule_cache_ttl_seconds: float = Field(300.0, alias="RULE_CACHE_TTL_SECONDS", ge=0)

    default_min_multiplier: float = Field(0.7, alias="DEFAULT_MIN_MULTIPLIER", ge=0)
    default_max_multiplier: float = Field(2.0, alias="DEFAULT_MAX_MULTIPLIER", ge=0)
    default_update_frequency: Literal["hourly", "daily", "weekly"] = Field(
        "daily", alias="DEFAULT_UPDATE_FREQUENCY"
    )

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    def model_post_init(self, __context: Any) -> None:
        """Populate the sync database URL from the async one when not provided."""

        if not self.sync_database_url:
            object.__setattr__(
                self,
                "sync_database_url",
                self.database_url.replace("+aiosqlite", "").replace(
                    "+asyncpg", "+psycopg"
                ),
            )

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
