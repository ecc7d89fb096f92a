# estate_portal/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Everything has a local-dev default, so the app boots with an empty .env
    (SQLite database, no image storage).

    Storage (.env):
      - SUPABASE_URL
      - SUPABASE_SERVICE_ROLE_KEY (backend only, uploads to the bucket)

    Sessions:
      - SESSION_BACKEND=database keeps sessions in the `web_sessions` table,
        "memory" keeps them in-process (single worker / tests only).
      - SESSION_TTL_SECONDS is an inactivity timeout: every request that
        carries the cookie pushes the expiry forward.
    """

    PROJECT_NAME: str = "Estate Portal API"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./estate_portal.db"

    # Sessions
    SESSION_BACKEND: Literal["database", "memory"] = "database"
    SESSION_COOKIE_NAME: str = "id"
    SESSION_TTL_SECONDS: int = Field(default=3600, gt=0)
    SESSION_COOKIE_SECURE: bool = False  # True in production behind HTTPS
    SESSION_COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "lax"
    SESSION_CLEANUP_INTERVAL_SECONDS: int = Field(default=300, gt=0)

    # Where anonymous visitors of dashboard routes are sent
    LOGIN_PATH: str = "/login"

    # First admin account, created only when the users table is empty
    ADMIN_BOOTSTRAP_NAME: str | None = None
    ADMIN_BOOTSTRAP_PASSWORD: str | None = Field(default=None, repr=False)

    # Supabase Storage (estate images)
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = Field(default=None, repr=False)
    SUPABASE_BUCKET: str = "assets"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def storage_enabled(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_SERVICE_ROLE_KEY)


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
