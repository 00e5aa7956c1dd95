"""
Configuration settings for the quiz engine service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_QUESTION_BANK = Path(__file__).parent / "quiz_engine" / "data" / "question_bank.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Question Repository
    # ========================================
    question_bank_path: Path = Field(
        default=DEFAULT_QUESTION_BANK,
        description="JSON question bank loaded into the question repository",
    )

    # ========================================
    # Session Store
    # ========================================
    session_backend: Literal["memory", "json", "sql"] = Field(
        default="memory",
        description="Where in-flight attempts, remediation and practice sessions live",
    )
    session_dir: Path = Field(
        default=Path.home() / ".quiz_engine" / "sessions",
        description="Directory for the json session backend",
    )
    database_url: str = Field(
        default="sqlite:///quiz_engine.db",
        description="SQLAlchemy connection string for the sql session backend",
    )
    session_expiry_hours: int = Field(
        default=24,
        ge=1,
        description="Age after which an explicit sweep removes a session",
    )

    # ========================================
    # Remediation & Practice
    # ========================================
    remediation_required_correct: int = Field(
        default=2,
        ge=1,
        description="Correct remedial answers needed to finish a remediation",
    )
    remediation_default_difficulty: Literal["easy", "standard", "hard"] = Field(
        default="standard",
        description="Difficulty recommended for missed questions in the quiz summary",
    )
    practice_initial_count: int = Field(
        default=5,
        ge=1,
        description="Questions served when a practice session starts",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated at 10 MB)",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )
    api_base_url: str = Field(
        default="http://127.0.0.1:8100",
        description="Base URL used by QuizEngineClient",
    )

    def get_session_config(self) -> dict[str, object]:
        """Get session store configuration as a dictionary."""
        return {
            "backend": self.session_backend,
            "session_dir": str(self.session_dir),
            "database_url": self.database_url.split("@")[-1]
            if "@" in self.database_url
            else self.database_url,
            "expiry_hours": self.session_expiry_hours,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
