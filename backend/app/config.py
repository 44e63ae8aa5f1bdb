"""
Application configuration module.
Loads environment variables and provides application-wide settings.
"""
import os
from pathlib import Path
from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

# Get project root (two levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Global flag to indicate test mode (set via --test flag or KIDLEDGER_TEST_MODE env var)
_test_mode = os.environ.get("KIDLEDGER_TEST_MODE", "").lower() in ("1", "true", "yes")


def set_test_mode(enabled: bool = True):
    """
    Enable/disable test mode globally.
    When enabled, DATABASE_URL will automatically use TEST_DATABASE_URL.

    Args:
        enabled: True to enable test mode, False to disable
    """
    global _test_mode
    _test_mode = enabled
    os.environ["KIDLEDGER_TEST_MODE"] = "1" if enabled else "0"


def is_test_mode() -> bool:
    """Check if test mode is enabled."""
    return _test_mode


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables or .env file.
    (Note: Environment variables take precedence over .env file)
    """
    # Database
    DATABASE_URL: str = "sqlite:///./backend/data/sqlite/app.db"
    TEST_DATABASE_URL: str = "sqlite:///./backend/data/sqlite/test_app.db"

    # Entity store implementation: "database" (SQLModel) or "memory" (process-local maps)
    STORAGE_BACKEND: Literal["database", "memory"] = "database"

    # Ledger
    # When enabled, postings against the same account are serialized with a per-account lock.
    # Off by default: postings are handled independently, as each request arrives.
    LEDGER_SERIALIZE_POSTINGS: bool = False

    # API
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "KidLedger"
    VERSION: str = "0.1.0"
    RECENT_TRANSACTIONS_LIMIT_MAX: int = 1000

    # Server
    PORT: int = 8000
    TEST_PORT: int = 8001

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = True

    # CORS (for frontend development)
    BACKEND_CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = ConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        case_sensitive=True,
        env_file_encoding='utf-8',
        extra='ignore',
        )


def get_settings() -> Settings:
    """
    Get settings instance.

    In test mode, DATABASE_URL is automatically overridden with TEST_DATABASE_URL.

    Returns:
        Settings: Application settings
    """
    settings = Settings()

    # Override DATABASE_URL if in test mode
    if is_test_mode():
        settings.DATABASE_URL = settings.TEST_DATABASE_URL

    return settings
