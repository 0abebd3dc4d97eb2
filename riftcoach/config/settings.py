"""
Configuration settings using Pydantic Settings.

All deployment-specific configuration is loaded from environment variables
(or a local .env file). Never hardcode credentials in the code.
"""

from datetime import UTC, datetime

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Database Configuration (match/timeline document store)
    database_url: str = Field("postgresql://localhost/riftcoach", alias="DATABASE_URL")
    database_pool_size: int = Field(10, alias="DATABASE_POOL_SIZE")
    database_command_timeout: float = Field(60.0, alias="DATABASE_COMMAND_TIMEOUT")

    # Redis Configuration
    redis_url: str = Field("redis://localhost:6379", alias="REDIS_URL")

    # Cache TTLs (seconds)
    cohort_cache_ttl_seconds: int = Field(7 * 24 * 3600, alias="COHORT_CACHE_TTL_SECONDS")
    cohort_bulk_cache_ttl_seconds: int = Field(30 * 60, alias="COHORT_BULK_CACHE_TTL_SECONDS")
    player_stats_cache_ttl_seconds: int = Field(
        24 * 3600,
        validation_alias=AliasChoices("PLAYER_STATS_CACHE_TTL_SECONDS", "CACHE_TTL_SECONDS"),
    )
    badge_result_cache_ttl_seconds: int = Field(24 * 3600, alias="BADGE_RESULT_CACHE_TTL_SECONDS")

    # Cohort sampling
    cohort_sample_limit: int = Field(1000, alias="COHORT_SAMPLE_LIMIT")
    cohort_bulk_sample_limit: int = Field(100, alias="COHORT_BULK_SAMPLE_LIMIT")
    cohort_default_window_start: datetime = Field(
        datetime(2025, 1, 1, tzinfo=UTC), alias="COHORT_DEFAULT_WINDOW_START"
    )
    cohort_default_window_end: datetime = Field(
        datetime(2026, 1, 1, tzinfo=UTC), alias="COHORT_DEFAULT_WINDOW_END"
    )
    cohort_bulk_concurrency: int = Field(5, ge=1, alias="COHORT_BULK_CONCURRENCY")
    min_reliable_sample: int = Field(5, ge=1, alias="MIN_RELIABLE_SAMPLE")
    # JSON list in the environment, e.g. ALLOWED_QUEUE_IDS=[440,420,400]
    allowed_queue_ids: list[int] = Field([440, 420, 400], alias="ALLOWED_QUEUE_IDS")

    # Data source boundary
    data_source_timeout_seconds: float = Field(30.0, alias="DATA_SOURCE_TIMEOUT_SECONDS")

    # Badges
    badge_catalog_path: str | None = Field(None, alias="BADGE_CATALOG_PATH")
    max_badges: int = Field(5, ge=1, alias="MAX_BADGES")

    # Google Gemini Configuration (badge narration)
    gemini_api_key: str | None = Field(None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-1.5-flash", alias="GEMINI_MODEL")
    gemini_temperature: float = Field(0.4, alias="GEMINI_TEMPERATURE")
    gemini_max_output_tokens: int = Field(2048, alias="GEMINI_MAX_OUTPUT_TOKENS")

    @field_validator("cohort_default_window_start", "cohort_default_window_end")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


# Global settings instance; every field has a default so import never fails.
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance.

    This function provides dependency injection support for settings.
    """
    return settings
