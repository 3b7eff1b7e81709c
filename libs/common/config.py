from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    STORE_NAME: str = "Cabella KC"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    # Database (Supabase Postgres)
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Supabase Storage
    # Placeholder values keep local/test runs from failing when storage
    # credentials are not required. Real deployments override via env.
    SUPABASE_URL: str = "http://localhost"
    SUPABASE_SERVICE_ROLE_KEY: str = "test-service-role-key"
    SUPABASE_STORAGE_BUCKET: str = "products"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # Authentication
    PASSWORD_HASH_ITERATIONS: int = 390_000

    # Sessions
    SESSION_BACKEND: Literal["memory", "redis"] = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    SESSION_TTL_SECONDS: int = 60 * 60 * 24 * 30
    SESSION_KEY_PREFIX: str = "storefront:session"

    # Notifications
    NOTIFICATION_FEED_LIMIT: int = 20

    # Email (SMTP)
    SMTP_HOST: str = "smtp-relay.brevo.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    DEFAULT_FROM_EMAIL: str = "no-reply@cabella-kc.fr"
    DEFAULT_FROM_NAME: str = "Cabella KC"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
