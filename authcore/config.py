"""Configuration settings for authcore."""

import os
import secrets
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

_GENERATED_SECRET = secrets.token_urlsafe(32)


def _get_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Built once per process and handed to the services that need it; nothing in
    the auth core reads the environment directly.
    """

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./authcore.db")

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", str(7 * 24 * 60)))
    AUTH_COOKIE_NAME: str = os.getenv("AUTH_COOKIE_NAME", "auth_jwt")

    # Passwords
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))
    RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "10"))

    # Email
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_USE_TLS: bool = _get_bool("SMTP_USE_TLS", "true")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "noreply@authcore.local")

    # Application
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = _get_bool("DEBUG", "false")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    @property
    def jwt_secret(self) -> str:
        """Signing key; falls back to a per-process random key when unset."""
        return self.JWT_SECRET_KEY or _GENERATED_SECRET

    @property
    def cookie_max_age(self) -> int:
        return self.JWT_EXPIRE_MINUTES * 60

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.JWT_SECRET_KEY == "":
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if not self.SMTP_HOST:
            errors.append("SMTP_HOST is not set - password reset emails are written to the log")
        return errors

    def validate_runtime(self) -> None:
        """Refuse to start with settings the app cannot serve requests with."""
        if self.BCRYPT_ROUNDS < 10:
            raise RuntimeError(f"BCRYPT_ROUNDS must be at least 10, got {self.BCRYPT_ROUNDS}.")
        if self.is_production and self.JWT_SECRET_KEY == "":
            raise RuntimeError("JWT_SECRET_KEY must be set in production.")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
