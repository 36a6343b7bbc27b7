from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    APP_NAME: str = "FitCoach API"
    APP_VERSION: str = "0.3.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./fitcoach.db"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # Redis (rate limiting + Celery broker)
    REDIS_URL: str = "redis://localhost:6379/0"

    # JWT
    JWT_SECRET_KEY: str = "your-super-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    PLAN_CREATE_LIMIT_PER_HOUR: int = 30
    LOG_CREATE_LIMIT_PER_HOUR: int = 20

    # Compliance sweep
    COMPLIANCE_TIMEZONE: str = "UTC"  # calendar days and day-of-week are computed here
    TODAY_SCAN_HOUR: int = 23
    MISSED_SCAN_HOUR: int = 0
    TRAINER_DASHBOARD_LINK: str = "/trainer/clients"
    CLIENT_PLAN_LINK: str = "/client/workouts"

    # Observability (GlitchTip/Sentry)
    GLITCHTIP_DSN: str = ""
    GLITCHTIP_TRACES_SAMPLE_RATE: float = 0.2
    GLITCHTIP_PROFILES_SAMPLE_RATE: float = 0.1

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
