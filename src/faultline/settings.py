"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the faultline generator.

    Values are read from ``FAULTLINE_*`` environment variables and from a
    ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="FAULTLINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"

    # Attributes
    attribute_namespace: str = "faultline"

    # Generated code
    module_prefix: str = "faultline_"
    runtime_module: str = "faultline.runtime"

    # Input safety
    max_source_size: int = 1_000_000  # characters
    max_declarations: int = 1_000
