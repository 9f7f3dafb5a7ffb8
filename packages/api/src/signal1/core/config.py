# This project was developed with assistance from AI tools.
"""
Application configuration.

All settings read from environment variables with sensible local dev defaults
(the ports match ``supabase start``). Group related settings together.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve project root .env regardless of CWD
_PROJECT_ROOT = Path(__file__).resolve().parents[5]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings -- single source of truth for env-driven config."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- App --
    APP_NAME: str = "signal1"
    DEBUG: bool = False
    SITE_URL: str = Field(
        default="http://localhost:5173",
        description="Public origin of the portal; OAuth redirects land here.",
    )

    # -- CORS --
    ALLOWED_HOSTS: list[str] = ["http://localhost:5173"]

    # -- Supabase --
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_ANON_KEY: str = Field(
        default="",
        description="Public anon key used by browser-equivalent clients.",
    )
    SUPABASE_SERVICE_ROLE_KEY: str | None = Field(
        default=None,
        description="Service-role key. Only the admin proxy may hold it; startup fails without it.",
    )
    SUPABASE_JWT_SECRET: str | None = Field(
        default=None,
        description="Legacy HS256 JWT secret. When unset, tokens are verified against the JWKS.",
    )
    SUPABASE_TIMEOUT: float = 10.0
    JWKS_CACHE_TTL: int = Field(
        default=300,
        description="JWKS cache lifetime in seconds (default 5 minutes).",
    )

    # -- Admin proxy --
    ADMIN_PROXY_URL: str = "http://localhost:4000"
    ADMIN_PROXY_HOST: str = "0.0.0.0"
    ADMIN_PROXY_PORT: int = 4000
    ADMIN_PROXY_LOG_LEVEL: str = "info"

    # -- Profile bootstrap --
    DEFAULT_PROFILE_ROLE: str | None = Field(
        default="lender",
        description="Role given to a new profile whose metadata has no valid role. "
        "Unset to leave such identities without a profile.",
    )
    BOOTSTRAP_MAX_ATTEMPTS: int = 5
    BOOTSTRAP_RETRY_DELAY_MS: int = 200

    # -- Storage --
    UPLOAD_MAX_SIZE_MB: int = 10
    SIGNED_URL_EXPIRES_IN: int = Field(
        default=3600,
        description="Lifetime in seconds of signed download URLs.",
    )


settings = Settings()
