"""Application configuration with security-first defaults.

Environment variables override all defaults.
JWT_SECRET and JWT_REFRESH_SECRET must be set in production - startup fails fast otherwise.
"""

import os
import warnings
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _secret(name: str, dev_default: str) -> str:
    value = os.getenv(name)
    if value:
        return value
    if os.getenv("ENVIRONMENT", "development") == "production":
        raise ValueError(
            f"CRITICAL: {name} must be set in production environment. "
            "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
        )
    warnings.warn(
        f"{name} not set in environment. Using development default. "
        "CHANGE THIS BEFORE PRODUCTION.",
        RuntimeWarning,
    )
    return dev_default


def _csv(name: str, default: str) -> List[str]:
    return [part.strip() for part in os.getenv(name, default).split(",") if part.strip()]


class Settings:
    PROJECT_NAME: str = "Medora"
    APP_URL: str = os.getenv("APP_URL", "http://localhost:3000")

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./medora.db")

    # JWT - access and refresh tokens use independent secrets
    JWT_SECRET: str = _secret("JWT_SECRET", "development-only-access-secret")
    JWT_REFRESH_SECRET: str = _secret("JWT_REFRESH_SECRET", "development-only-refresh-secret")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = _csv(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    )
    ALLOWED_HOSTS: List[str] = _csv(
        "ALLOWED_HOSTS", "localhost,127.0.0.1,localhost:8000,127.0.0.1:8000,testserver"
    )

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # Password Policy
    MIN_PASSWORD_LENGTH: int = 8

    # Catalog
    LOW_STOCK_THRESHOLD: int = 10
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
