"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """TwoGether service settings, read from the environment or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="TwoGether API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    log_level: str = Field(default="INFO")
    log_json: bool | None = Field(
        default=None,
        description="Force JSON log output (defaults to on in production)",
    )

    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/twogether",
        description="Postgres URL; plain postgresql:// is rewritten for asyncpg",
    )

    # Sessions are Supabase access tokens: ES256 via the project's JWKS,
    # HS256 with the shared secret for legacy projects and tests.
    supabase_url: str = Field(default="", description="Supabase project URL")
    jwt_secret_key: str = Field(default="CHANGE-ME-IN-PRODUCTION")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=30)

    realtime_enabled: bool = Field(
        default=True,
        description="Push new chat messages to subscribers; off selects the null broker",
    )
    realtime_outbox_size: int = Field(
        default=100,
        ge=1,
        description="Frames buffered per feed socket before a slow client is disconnected",
    )

    rate_limit_enabled: bool = Field(default=True)
    rate_limit_read: str = Field(default="60/minute")
    rate_limit_write: str = Field(default="20/minute")
    rate_limit_chat: str = Field(
        default="30/minute",
        description="Per client limit on posting chat messages",
    )

    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated origins of the web app",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def supabase_jwks_url(self) -> str:
        if not self.supabase_url:
            return ""
        return f"{self.supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Hosted Postgres providers hand out ``postgresql://`` URLs."""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
