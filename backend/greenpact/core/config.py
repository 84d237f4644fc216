"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="GREENPACT_",
        extra="ignore",
    )

    app_name: str = "Greenpact Consulting"
    secret_key: str = "change-me"
    # Enables POST /auth/create-admin when set
    admin_secret: str | None = None

    # Database
    database_url: str = "sqlite+aiosqlite:///./greenpact.db"

    # Sessions
    access_token_expire_minutes: int = 60
    allowed_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # One-time registration codes
    otp_length: int = 6
    otp_expire_minutes: int = 5
    otp_purge_interval_seconds: int = 60

    # Uploads
    upload_dir: str = "uploads"
    profile_picture_max_bytes: int = 2 * 1024 * 1024

    # Email (SMTP). Codes are only logged at DEBUG when smtp_host is empty.
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_from_email: str = "noreply@greenpactconsulting.com"
    smtp_from_name: str = "Greenpact Consulting"
    smtp_use_tls: bool = True
    smtp_timeout_seconds: int = 15

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def session_max_age_seconds(self) -> int:
        return self.access_token_expire_minutes * 60


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()
