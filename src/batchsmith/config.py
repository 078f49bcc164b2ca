"""Configuration management for Batchsmith."""
from functools import lru_cache
from typing import List, Optional
from pydantic import Field, NonNegativeFloat
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required variables must be set, optional ones have defaults.
    """

    # Application
    APP_NAME: str = "Batchsmith"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_ECHO: bool = False

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Testing
    TEST_DATABASE_URL: Optional[str] = None

    # Retry defaults, used when app_settings is unreachable or incomplete.
    # RETRY_DELAYS[0] is the wait before attempt 2.
    RETRY_DELAYS: List[NonNegativeFloat] = Field(
        default_factory=lambda: [5, 30, 120, 300, 300, 300]
    )
    MAX_RETRY_ATTEMPTS: int = Field(default=7, ge=1)
    STRICT_ATTEMPT_TRACKING: bool = False

    # Single-flight guard for the orchestration trigger. The lock is renewed
    # while a run is active; the TTL only bounds how long a crashed run blocks.
    JOB_LOCK_TTL_SECONDS: int = Field(default=60, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Singleton settings instance
    """
    return Settings()
