"""Configuration settings for Blogspace."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

DEFAULT_ADMIN_PASSWORD = "admin12345"


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./blogspace.db")
    AUTO_CREATE_TABLES: bool = os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true"

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", str(30 * 24 * 60)))

    # Password reset
    PASSWORD_RESET_EXPIRE_MINUTES: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "10"))
    PASSWORD_RESET_CODE_BYTES: int = int(os.getenv("PASSWORD_RESET_CODE_BYTES", "3"))

    # Admin bootstrap
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", DEFAULT_ADMIN_PASSWORD)

    # Mail
    EMAIL_PROVIDER: str = os.getenv("EMAIL_PROVIDER", "console")  # console, smtp
    SMTP_SERVER: str = os.getenv("SMTP_SERVER", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    MAIL_FROM_EMAIL: str = os.getenv("MAIL_FROM_EMAIL", "noreply@example.com")
    MAIL_FROM_NAME: str = os.getenv("MAIL_FROM_NAME", "Blogspace")

    # Application
    CORS_ORIGINS: list[str] = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        self._generated_secret = not self.JWT_SECRET_KEY
        if self._generated_secret:
            self.JWT_SECRET_KEY = secrets.token_urlsafe(32)

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self._generated_secret:
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if self.ADMIN_PASSWORD == DEFAULT_ADMIN_PASSWORD:
            errors.append("ADMIN_PASSWORD is not set - the bootstrap admin uses the default password")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
