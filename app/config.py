"""Configuration settings for Kkal Tracker."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

MIN_JWT_SECRET_LENGTH = 32

INSECURE_JWT_SECRETS = {
    "",
    "default-secret-key",
    "default-secret-key-dev-only",
    "your-jwt-secret-key-change-this-in-production",
    "a-very-secret-key",
}


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./kkal_tracker.db")

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", "1440"))

    # Password hashing
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Activation
    ACTIVATION_TOKEN_TTL_HOURS: int = int(os.getenv("ACTIVATION_TOKEN_TTL_HOURS", "24"))

    # SMTP
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_FROM: str = os.getenv("SMTP_FROM", "noreply@kkal-tracker.com")
    SMTP_TIMEOUT_SECONDS: float = float(os.getenv("SMTP_TIMEOUT_SECONDS", "10"))
    SMTP_SEND_DEADLINE_SECONDS: float = float(os.getenv("SMTP_SEND_DEADLINE_SECONDS", "30"))

    # Application
    APP_URL: str = os.getenv("APP_URL", "http://localhost:8080")
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        self.jwt_secret_generated = False
        if not self.JWT_SECRET_KEY and not self.is_production:
            self.JWT_SECRET_KEY = secrets.token_urlsafe(MIN_JWT_SECRET_LENGTH)
            self.jwt_secret_generated = True

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    def validate(self) -> list[str]:
        """Validate settings and return list of problems."""
        errors = []
        if self.jwt_secret_generated:
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        elif self.JWT_SECRET_KEY in INSECURE_JWT_SECRETS:
            errors.append("JWT_SECRET_KEY is empty or a known insecure default")
        elif len(self.JWT_SECRET_KEY) < MIN_JWT_SECRET_LENGTH:
            errors.append(
                f"JWT_SECRET_KEY must be at least {MIN_JWT_SECRET_LENGTH} characters "
                f"(current: {len(self.JWT_SECRET_KEY)})"
            )
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
