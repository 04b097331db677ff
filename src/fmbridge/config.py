"""Configuration management for fmbridge."""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APPLE_INTELLIGENCE_LANGUAGES = [
    "en",
    "fr",
    "de",
    "it",
    "pt-BR",
    "es",
    "ja",
    "ko",
    "zh-Hans",
]


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="FMBRIDGE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Backend Configuration
    backend: str = Field(default="apple", description="Model backend ('apple' or 'echo')")

    # Capability Report
    max_input_tokens: int = Field(default=8192, description="Context size reported by getModelCapabilities")
    max_output_tokens: int = Field(default=4096, description="Output cap reported by getModelCapabilities")
    supports_streaming: bool = Field(default=True)
    supports_tool_calling: bool = Field(default=True)
    capabilities_version: str = Field(default="26.0", description="Framework version reported to callers")
    supported_languages: list[str] = Field(default_factory=lambda: list(APPLE_INTELLIGENCE_LANGUAGES))

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")


def get_settings(**overrides: Any) -> Settings:
    """Get application settings.

    Args:
        **overrides: Explicit values that win over the environment and ``.env``.

    Returns:
        Settings instance
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**values)
