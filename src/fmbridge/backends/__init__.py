"""Model backends and selection."""

from __future__ import annotations

from fmbridge.backends.apple import AppleModel
from fmbridge.backends.base import LanguageModel, ModelSession
from fmbridge.backends.echo import EchoModel
from fmbridge.config import Settings
from fmbridge.errors import ConfigurationError

UNKNOWN_BACKEND_TEMPLATE = "Unknown backend: {name!r} (expected 'apple' or 'echo')."


def build_model(name: str, settings: Settings | None = None) -> LanguageModel:
    """Build the model backend registered under ``name``."""
    normalized = name.strip().casefold()
    if normalized == "apple":
        return AppleModel(settings)
    if normalized == "echo":
        return EchoModel()
    raise ConfigurationError(UNKNOWN_BACKEND_TEMPLATE.format(name=name))


__all__ = ["AppleModel", "EchoModel", "LanguageModel", "ModelSession", "build_model"]
