# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv. Detection thresholds are fixed constants in
the detector modules and are deliberately not configurable here.
"""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class AnalysisSettings(BaseSettings):
    """Input files and limits for the analyze command."""

    model_config = SettingsConfigDict(env_prefix="ANALYSIS_")

    recordings_file: Path = Field(
        default=Path("RRweb data.json"), description="Path to the recorded sessions JSON export"
    )
    events_file: Path = Field(
        default=Path("events.json"), description="Path to the analytics events JSON export"
    )
    max_records_per_session: int = Field(
        default=50000, gt=0, description="Records kept per session before analysis"
    )
    include_context: bool = Field(
        default=True, description="Attach surrounding events to moments in JSON output"
    )
    session_timeout_minutes: int = Field(
        default=30, gt=0, description="Inactivity timeout for grouping analytics events"
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
