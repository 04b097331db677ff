from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from fmbridge.availability import Availability, AvailabilityReason
from fmbridge.config import Settings
from fmbridge.dispatcher import Dispatcher
from fmbridge.options import GenerationOptions


@dataclass
class FakeSession:
    instructions: str | None = None
    replies: list[str] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)
    options: list[GenerationOptions] = field(default_factory=list)
    error: Exception | None = None

    async def respond(self, prompt: str, options: GenerationOptions) -> str:
        self.prompts.append(prompt)
        self.options.append(options)
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return f"reply to: {prompt}"


@dataclass
class FakeModel:
    name: str = "fake"
    available: bool = True
    reason: AvailabilityReason = AvailabilityReason.DEVICE_NOT_ELIGIBLE
    reply: str | None = None
    error: Exception | None = None
    probes: int = 0
    sessions: list[FakeSession] = field(default_factory=list)
    on_new_session: Callable[[FakeSession], None] | None = None

    def availability(self) -> Availability:
        self.probes += 1
        if self.available:
            return Availability.AVAILABLE
        return Availability.unavailable(self.reason)

    def supported_languages(self) -> list[str]:
        return ["en", "fr"]

    def new_session(self, instructions: str | None = None) -> FakeSession:
        session = FakeSession(instructions=instructions, error=self.error)
        if self.reply is not None:
            session.replies.append(self.reply)
        if self.on_new_session is not None:
            self.on_new_session(session)
        self.sessions.append(session)
        return session


@pytest.fixture
def settings() -> Settings:
    return Settings(backend="echo", log_level="DEBUG")


@pytest.fixture
def model() -> FakeModel:
    return FakeModel()


@pytest.fixture
def dispatcher(model: FakeModel, settings: Settings) -> Dispatcher:
    return Dispatcher(model, settings=settings)
