"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./saladplanner.db"

    # Sessions
    session_ttl_days: int = 30

    # Weekly roster reset
    reset_scheduler_enabled: bool = True
    default_reset_day_of_week: int = Field(default=5, ge=0, le=6)  # 0=Sunday
    default_reset_hour: int = Field(default=23, ge=0, le=23)
    default_reset_minute: int = Field(default=59, ge=0, le=59)

    # Billing
    currency: str = "EUR"

    # Server
    host: str = "0.0.0.0"
    port: int = 4000

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:5173"

    @property
    def origins(self) -> list[str]:
        """Get the CORS origins as a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
