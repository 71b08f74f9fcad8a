"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "Guess the Commit"
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # GitHub API
    github_api_url: str = "https://api.github.com"
    github_accept: str = "application/vnd.github.v3+json"
    github_user_agent: str = "GuessTheCommit/1.0"
    github_requests_per_second: float = 10.0
    github_burst_size: int = 20
    commit_fetch_max_retries: int = 2

    # Deck building
    commits_per_author_hint: int = 15
    commits_per_repository_hint: int = 30
    deck_budget: int = 50
    min_commits_per_author: int = 5

    # Game
    feedback_delay_seconds: float = 2.0

    @field_validator(
        "commits_per_author_hint",
        "commits_per_repository_hint",
        "deck_budget",
        "min_commits_per_author",
        "github_burst_size",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Reject zero or negative sizes."""
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("feedback_delay_seconds", "github_requests_per_second")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
