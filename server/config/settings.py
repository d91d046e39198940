"""
Configuration Management System

Settings for the task/event link server.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Server settings for the task/event link server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MCP_",
        extra="ignore",
    )

    data_dir: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent / "data",
        description="Data storage directory",
    )

    # Google API settings
    google_token_path: Optional[Path] = Field(
        default=None,
        description="Authorized user token file (defaults to <data_dir>/token.json)"
    )

    default_tasklist: str = Field(
        default="@default",
        description="Google Tasks list used for task lookups"
    )

    default_calendar_id: str = Field(
        default="primary",
        description="Google Calendar used for event lookups"
    )

    default_time_zone: str = Field(
        default="UTC",
        description="Time zone used to resolve time range presets"
    )

    # Availability search defaults
    default_min_duration_minutes: int = Field(
        default=30,
        ge=0,
        description="Minimum free slot length in minutes"
    )

    default_max_free_slots: int = Field(
        default=5,
        ge=1,
        description="Maximum number of free slots returned"
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Host the MCP server binds to"
    )

    server_port: int = Field(
        default=8084,
        description="Port the MCP server listens on"
    )

    log_level: str = Field(
        default="INFO",
        description="Log level for the server loggers"
    )

    @property
    def token_path(self) -> Path:
        """Resolved location of the stored Google token."""
        return self.google_token_path or self.data_dir / "token.json"


# ============= Singleton Pattern =============

# Global settings instance for application-wide access
_settings: Optional[ServerSettings] = None


def get_settings() -> ServerSettings:
    """
    Get or create the global settings singleton instance.

    Implements lazy initialization of the settings object.
    The first call creates the instance, subsequent calls
    return the same instance for consistency.

    Returns:
        ServerSettings: The global settings instance
    """
    global _settings
    if _settings is None:
        _settings = ServerSettings()
    return _settings
