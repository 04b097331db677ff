"""Offline echo backend for development hosts without Apple Intelligence."""

from __future__ import annotations

from fmbridge.availability import Availability
from fmbridge.options import GenerationOptions


class EchoSession:
    def __init__(self, instructions: str | None = None) -> None:
        self.instructions = instructions
        self.history: list[tuple[str, str]] = []

    async def respond(self, prompt: str, options: GenerationOptions) -> str:
        turn = len(self.history) + 1
        reply = f"[turn={turn}] {prompt}"
        if options.max_tokens is not None:
            reply = " ".join(reply.split(" ")[: options.max_tokens])
        self.history.append((prompt, reply))
        return reply


class EchoModel:
    name = "echo"

    def availability(self) -> Availability:
        return Availability.AVAILABLE

    def supported_languages(self) -> list[str]:
        return ["en"]

    def new_session(self, instructions: str | None = None) -> EchoSession:
        return EchoSession(instructions)
