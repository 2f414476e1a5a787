"""
Configuration management for the vocabulary study engine
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Storage Configuration
    database_url: str = Field(default="sqlite:///data/tango.db")
    local_progress_path: str = Field(default="data/local_progress.json")

    # Application Configuration
    log_level: str = Field(default="INFO")

    # Identity
    token_secret: str = Field(default="change-me")
    token_ttl_hours: int = Field(default=168)

    # Session Setup
    default_word_count: int = Field(default=10)
    min_quiz_word_count: int = Field(default=4)

    # Flashcard timing
    flashcard_time_limit_ms: int = Field(default=5000)
    flashcard_tick_ms: int = Field(default=1000)
    flashcard_expiry_grace_ms: int = Field(default=1000)

    # Quiz timing
    quiz_time_limit_ms: int = Field(default=10000)
    quiz_tick_ms: int = Field(default=100)
    quiz_expiry_grace_ms: int = Field(default=0)
    quiz_review_delay_ms: int = Field(default=2000)

    # Session housekeeping
    session_max_age_hours: int = Field(default=24)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@dataclass(frozen=True)
class StudyTimings:
    """Countdown and delay values handed to study sessions"""

    flashcard_time_limit_ms: int = 5000
    flashcard_tick_ms: int = 1000
    flashcard_expiry_grace_ms: int = 1000
    quiz_time_limit_ms: int = 10000
    quiz_tick_ms: int = 100
    quiz_expiry_grace_ms: int = 0
    quiz_review_delay_ms: int = 2000

    @classmethod
    def from_settings(cls, settings: Settings) -> "StudyTimings":
        return cls(
            flashcard_time_limit_ms=settings.flashcard_time_limit_ms,
            flashcard_tick_ms=settings.flashcard_tick_ms,
            flashcard_expiry_grace_ms=settings.flashcard_expiry_grace_ms,
            quiz_time_limit_ms=settings.quiz_time_limit_ms,
            quiz_tick_ms=settings.quiz_tick_ms,
            quiz_expiry_grace_ms=settings.quiz_expiry_grace_ms,
            quiz_review_delay_ms=settings.quiz_review_delay_ms,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_database_path() -> str:
    """Get the database file path from URL"""
    settings = get_settings()
    if settings.database_url.startswith("sqlite:///"):
        return settings.database_url.replace("sqlite:///", "")
    return "data/tango.db"
