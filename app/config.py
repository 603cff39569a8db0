"""Configuration settings for the Water Temperature API."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./water_temperature.db")
    DATABASE_AUTO_CREATE: bool = _env_bool("DATABASE_AUTO_CREATE", "true")

    # JWT
    JWT_SECRET: str = os.getenv("JWT_SECRET", "")
    JWT_TOKEN_LIFETIME_HOURS: int = int(os.getenv("JWT_TOKEN_LIFETIME_HOURS", "24"))
    JWT_CLOCK_SKEW_SECONDS: int = int(os.getenv("JWT_CLOCK_SKEW_SECONDS", "30"))

    # Accounts
    MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "8"))
    BCRYPT_WORK_FACTOR: int = int(os.getenv("BCRYPT_WORK_FACTOR", "12"))
    LOGIN_DELAY_MS: int = int(os.getenv("LOGIN_DELAY_MS", "0"))
    SINGLE_ACCOUNT: bool = _env_bool("SINGLE_ACCOUNT", "true")

    # HTTP
    CORS_ALLOWED_ORIGINS: str = os.getenv("CORS_ALLOWED_ORIGINS", "")
    MAX_REQUEST_SIZE_KB: int = int(os.getenv("MAX_REQUEST_SIZE_KB", "5120"))

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = _env_bool("DEBUG", "false")

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins; an empty list means any origin."""
        return [origin.strip() for origin in self.CORS_ALLOWED_ORIGINS.split(";") if origin.strip()]

    def validate(self) -> list[str]:
        """Validate settings and return list of errors."""
        errors = []
        if not self.JWT_SECRET.strip():
            errors.append("JWT_SECRET is not set")
        if not 1 <= self.JWT_TOKEN_LIFETIME_HOURS <= 24 * 7:
            errors.append("JWT_TOKEN_LIFETIME_HOURS must be between 1 and 168 (1 hour to 7 days)")
        if self.JWT_CLOCK_SKEW_SECONDS < 0:
            errors.append("JWT_CLOCK_SKEW_SECONDS must not be negative")
        if not 6 <= self.MIN_PASSWORD_LENGTH <= 128:
            errors.append("MIN_PASSWORD_LENGTH must be between 6 and 128")
        if not 4 <= self.BCRYPT_WORK_FACTOR <= 31:
            errors.append("BCRYPT_WORK_FACTOR must be between 4 and 31")
        if self.LOGIN_DELAY_MS < 0:
            errors.append("LOGIN_DELAY_MS must not be negative")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
