"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded in prod)
    - get_settings() is cached (lru_cache): single instance per process
    - Routes receive settings through Depends(get_settings) so tests can override them

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from app.core.upload_policy import MAX_SHORT_SIZE_BYTES, SHORTS_SUBDIRECTORY

# backend/ directory; relative upload paths resolve against it
APP_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://throwback:throwback@db:5432/throwback"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60
    auth_cookie_name: str = "token"
    auth_cookie_secure: bool = False
    login_url: str = "/login"
    bootstrap_admin_email: str = "admin@throwback.com"

    # Uploads
    upload_root: Path = APP_ROOT / "uploads"
    max_short_size_bytes: int = MAX_SHORT_SIZE_BYTES
    orphan_grace_seconds: int = 3600

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("upload_root", mode="after")
    @classmethod
    def anchor_upload_root(cls, v: Path) -> Path:
        return v if v.is_absolute() else APP_ROOT / v

    @property
    def shorts_dir(self) -> Path:
        return self.upload_root / SHORTS_SUBDIRECTORY


@lru_cache
def get_settings() -> Settings:
    return Settings()
