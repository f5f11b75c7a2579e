"""
Faith Activity Statistics
Centralized Configuration Management

Configuration for the aggregation engine and its data sources using Pydantic
settings with environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimeSettings(BaseSettings):
    """Bucket calendar configuration"""

    model_config = SettingsConfigDict(env_prefix="STATS_")

    timezone: str = Field(default="America/Chicago", description="Civil timezone for bucket boundaries")
    rollover_hour: int = Field(default=4, ge=0, le=23, description="Local hour at which a logical day starts")
    week_start_day: int = Field(default=6, ge=0, le=6, description="First day of week (0=Monday, 6=Sunday)")
    daily_window: int = Field(default=30, gt=0, description="Number of day buckets in daily reports")
    weekly_window: int = Field(default=12, gt=0, description="Number of week buckets in weekly reports")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone name against the tz database"""
        import pytz

        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v


class AnkiSettings(BaseSettings):
    """Anki collection (flashcard review history) configuration"""

    model_config = SettingsConfigDict(env_prefix="ANKI_")

    db_path: Optional[str] = Field(default=None, description="Path to collection.anki2")
    deck_name: str = Field(default="Bible::Verses", description="Deck name, nested decks joined by \"::\"")
    note_type: str = Field(default="Bible Verse", description="Note type name")
    mature_interval_days: int = Field(default=21, description="Interval at which a card counts as mature")
    young_interval_days: int = Field(default=7, description="Interval at which a card counts as young")


class ReadingSettings(BaseSettings):
    """KOReader statistics (reading log) configuration"""

    model_config = SettingsConfigDict(env_prefix="KOREADER_")

    db_path: Optional[str] = Field(default=None, description="Path to statistics.sqlite3")
    title_pattern: str = Field(default="%Bible%", description="SQL LIKE pattern for tracked book titles")


class PrayerSettings(BaseSettings):
    """Prayer log configuration"""

    model_config = SettingsConfigDict(env_prefix="PRAYER_")

    db_path: Optional[str] = Field(default=None, description="Path to the prayer log database")
    table: str = Field(default="prayer_session", description="Session table name")
    start_column: str = Field(default="start_time", description="Session start column (unix seconds)")
    duration_column: str = Field(default="duration", description="Session duration column (seconds)")


class ArcSettings(BaseSettings):
    """Arc Timeline export (location/attendance log) configuration"""

    model_config = SettingsConfigDict(env_prefix="ARC_")

    export_path: Optional[str] = Field(default=None, description="Arc export directory")
    church_place_name: str = Field(default="Martin Luther Church", description="Place counted as attendance")
    home_place_name: str = Field(default="Home", description="Place excluded from top places")
    top_places_days: int = Field(default=182, gt=0, description="Trailing window for top places")
    top_places_limit: int = Field(default=10, gt=0, description="Number of top places returned")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="text", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="faithstats", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")

    # Subsystem configurations
    time: TimeSettings = Field(default_factory=TimeSettings)
    anki: AnkiSettings = Field(default_factory=AnkiSettings)
    reading: ReadingSettings = Field(default_factory=ReadingSettings)
    prayer: PrayerSettings = Field(default_factory=PrayerSettings)
    arc: ArcSettings = Field(default_factory=ArcSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
