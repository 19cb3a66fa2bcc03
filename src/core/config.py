"""Configuration management for petquest."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Configuration
    storage_backend: Literal["memory", "sqlite"] = Field(
        default="memory", description="Repository backend for pets and task progress"
    )
    sqlite_db_path: str = Field(default="./data/petquest.db", description="SQLite database file path")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name")

    # Gameplay Configuration
    hunger_threshold_hours: float = Field(
        default=12.0, description="Hours since last feeding after which a pet is reported Hungry"
    )
    random_seed: int | None = Field(
        default=None, description="Seed for attribute growth on level-up (None for nondeterministic)"
    )
    seed_demo_data: bool = Field(default=False, description="Load demo pets and task progress at startup")


# Application Constants
class Constants:
    """Fixed gameplay rules and limits."""

    # Experience curve: required(level) = level^2 * EXPERIENCE_CURVE_FACTOR
    EXPERIENCE_CURVE_FACTOR: int = 100

    # Advisory estimates for the next level
    EXPERIENCE_PER_TRAINING_SESSION: int = 100
    TRAINING_SESSIONS_PER_BATCH: int = 5
    EXPERIENCE_PER_DAY: int = 200

    # Attribute and vitality bounds
    STAT_MIN: int = 0
    STAT_MAX: int = 100
    ATTRIBUTE_INCREASE_CHOICES: tuple[int, ...] = (1, 2, 2, 3)

    # Status effect thresholds
    VERY_HAPPY_THRESHOLD: int = 90
    HAPPY_THRESHOLD: int = 70
    SAD_THRESHOLD: int = 30
    ENERGETIC_THRESHOLD: int = 90
    TIRED_THRESHOLD: int = 30
    NEEDS_CARE_THRESHOLD: int = 50

    # Task progress bounds (percent)
    PROGRESS_MIN: int = 0
    PROGRESS_MAX: int = 100

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
