"""Human-friendly configuration loader.

The ``Settings`` class centralises every environment variable we rely on. That
means anyone inspecting the project can quickly answer the questions:

*What:* Which settings exist and what do they control?
*When:* They are read once at startup when the module is imported.
*Why:* Centralising configuration prevents magic strings scattered all over the
codebase.
*How:* pydantic-settings reads the process environment plus ``.env`` files and
coerces each value to the annotated type, falling back to a sensible default so
the app can boot in development without extra setup.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Clockwork"
    LOG_LEVEL: str = "INFO"

    # Base folders keep file-path building consistent. ``BASE_DIR`` points to
    # the repository root so we can easily derive the static directory.
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")
    STATIC_DIR: Path | None = None
    UPLOADS_DIR: Path | None = None

    # Calendar days ("today", history buckets) are evaluated in this zone.
    TZ: str = "UTC"

    # ---- Bearer tokens
    JWT_SECRET: str = "change-me"
    JWT_TTL_MINUTES: int = 60 * 24 * 7
    JWT_AUDIENCE: str = "clockwork-clients"
    JWT_ISSUER: str = "clockwork"
    BCRYPT_ROUNDS: int = 12

    # ---- Google sign-in
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CERTS_URL: str = "https://www.googleapis.com/oauth2/v3/certs"

    # ---- Logo asset
    PUBLIC_BASE_URL: str = "http://localhost:8089"
    LOGO_MAX_BYTES: int = 3 * 1024 * 1024
    DEFAULT_LOGO_NAME: str = "logo.png"

    HISTORY_MAX_DAYS: int = 90

    # Comma separated list of origins allowed by CORS.
    ALLOWED_ORIGINS: str = "http://localhost:5173"
    # Per client IP; applies to every route without its own limit.
    RATE_LIMIT: str = "300 per 15 minutes"
    LOGIN_RATE_LIMIT: str = "5 per 10 minutes"

    # Database URL; left empty it becomes a SQLite file under ``DATA_DIR`` so
    # local demos work out-of-the-box.
    DB_URL: str = Field(
        default="",
        validation_alias=AliasChoices("DB_URL", "DATABASE_URL"),
    )

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def check_bcrypt_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return value

    @property
    def allowed_origins(self) -> list[str]:
        return [item.strip() for item in self.ALLOWED_ORIGINS.split(",") if item.strip()]

    @property
    def public_base_url(self) -> str:
        return self.PUBLIC_BASE_URL.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    if not settings.DB_URL:
        settings.DB_URL = f"sqlite:///{settings.DATA_DIR / 'clockwork.db'}"
    if settings.STATIC_DIR is None:
        settings.STATIC_DIR = settings.BASE_DIR / "app" / "static"
    if settings.UPLOADS_DIR is None:
        settings.UPLOADS_DIR = settings.DATA_DIR / "uploads"
    settings.UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
    return settings


# Instantiating here means importing ``settings`` anywhere instantly gives you
# access to the configured values without rebuilding the object each time.
settings = get_settings()
