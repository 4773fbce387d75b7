"""
Intake Configuration Module

Environment-based configuration with fail-fast validation.
All settings are loaded from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_prefix="INTAKE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: Literal["development", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory for runtime data (db, uploads)",
    )

    # OpenAI Configuration
    openai_api_key: str = Field(
        default="",
        alias="OPENAI_API_KEY",
        description="OpenAI API key for CV contact extraction",
    )
    cv_ai_confidence_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Ask the AI when heuristic CV confidence is below this",
    )

    # Sessions
    session_expiry_hours: int = Field(
        default=48,
        ge=1,
        description="Incomplete sessions idle this long are deactivated",
    )

    # Uploads
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum CV/transcript size in megabytes",
    )

    # Recruiter view
    anonymized_name_placeholder: str = Field(
        default="&*******&",
        min_length=1,
        description="Shown instead of the candidate name",
    )

    @field_validator("data_dir", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Convert string to Path."""
        return Path(v)

    def ensure_data_dir(self) -> None:
        """Create data directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Path to SQLite database."""
        return self.data_dir / "intake.db"

    @property
    def uploads_dir(self) -> Path:
        """Directory for uploaded CVs and transcripts."""
        return self.data_dir / "uploads"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def ai_enabled(self) -> bool:
        return bool(self.openai_api_key)


def get_settings() -> Settings:
    """
    Get validated settings instance.

    Raises:
        ValidationError: If settings are invalid.
    """
    settings = Settings()
    settings.ensure_data_dir()
    return settings
