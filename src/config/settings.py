"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use EXTRACT_README_ prefix (e.g., EXTRACT_README_TOOLCHAIN=stable).

Settings can also be loaded from a .env file in the working directory.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use EXTRACT_README_ prefix.

    Examples:
        EXTRACT_README_DEFAULT_CODE_HINT=rust
        EXTRACT_README_TOOLCHAIN=nightly-2024-06-01
        EXTRACT_README_CARGO_COMMAND=/opt/cargo/bin/cargo
    """

    model_config = SettingsConfigDict(
        env_prefix="EXTRACT_README_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Rewriting configuration
    default_code_hint: str = Field(
        default="rust",
        description="Language given to fenced code blocks written without one",
    )

    hidden_line_prefix: str = Field(
        default="# ",
        description="Lines inside code blocks starting with this prefix are dropped",
    )

    # Build configuration
    toolchain: str = Field(
        default="nightly",
        description="Toolchain used to build rustdoc JSON (cargo +<toolchain>)",
    )

    cargo_command: str = Field(
        default="cargo",
        description="cargo executable to invoke",
    )


# Singleton instance - import this in your code
appsettings = AppSettings()
