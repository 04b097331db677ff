"""Backend contracts for on-device language models."""

from __future__ import annotations

from typing import Protocol

from fmbridge.availability import Availability
from fmbridge.options import GenerationOptions


class ModelSession(Protocol):
    """Conversation state owned by the model framework."""

    instructions: str | None

    async def respond(self, prompt: str, options: GenerationOptions) -> str:
        """Submit one prompt and return the raw generated text."""
        ...


class LanguageModel(Protocol):
    """Minimal contract every model backend satisfies."""

    name: str

    def availability(self) -> Availability:
        """Report whether the model can be used on this host."""
        ...

    def supported_languages(self) -> list[str]: ...

    def new_session(self, instructions: str | None = None) -> ModelSession: ...
