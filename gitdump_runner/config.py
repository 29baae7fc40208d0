"""Configuration settings for gitdump_runner.

Uses pydantic-settings for config parsing from environment variables
and defaults. The source URL and output directory come from CLI flags;
everything else can be tuned via GITDUMP_* variables.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the GITDUMP_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="GITDUMP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Docker engine
    docker_host: str | None = Field(
        default=None,
        description="Docker daemon URL (uses DOCKER_HOST/defaults if not set)",
    )
    docker_timeout: int = Field(
        default=60,
        ge=1,
        le=3600,
        description="Timeout for Docker API calls in seconds",
    )
    platform: str = Field(
        default="linux",
        description="Platform requested when creating the container",
    )

    # Image
    context_archive: Path | None = Field(
        default=None,
        description="Gzipped build context to use instead of the packaged one",
    )
    image_tag: str | None = Field(
        default=None,
        description="Optional tag applied to the built image",
    )

    # Container
    dumper_command: str = Field(
        default="git-dumper",
        description="Executable invoked as the container entrypoint",
    )
    mount_target: str = Field(
        default="/git",
        description="In-container path the output directory is bound to",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("mount_target")
    @classmethod
    def validate_mount_target(cls, v: str) -> str:
        """Validate mount target is an absolute container path."""
        if not v.startswith("/"):
            raise ValueError("mount_target must start with '/'")
        return v


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
