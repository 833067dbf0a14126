"""Process-level settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables (``SIGNALCORE_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="SIGNALCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Divergence preset used when the caller does not pick one
    divergence_preset: str = "interactive"

    # Strong divergence qualification (fractions)
    min_strong_score: float = 0.75
    min_strong_price_delta_pct: float = 0.01


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
