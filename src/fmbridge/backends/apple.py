"""Apple Foundation Models backend."""

from __future__ import annotations

import asyncio
import platform
from typing import Any

from loguru import logger

from fmbridge.availability import Availability, AvailabilityReason, classify_reason
from fmbridge.config import Settings
from fmbridge.errors import GenerationError
from fmbridge.options import GenerationOptions

MIN_MACOS_MAJOR = 26


def parse_macos_version() -> tuple[int, int, int]:
    version_str = platform.mac_ver()[0]
    parts = [int(p) for p in version_str.split(".") if p.isdigit()]
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


class AppleSession:
    """One ``applefoundationmodels.Session`` driven from asyncio."""

    def __init__(self, instructions: str | None = None) -> None:
        from applefoundationmodels import Session

        self.instructions = instructions
        self._session = Session(instructions=instructions) if instructions is not None else Session()

    async def respond(self, prompt: str, options: GenerationOptions) -> str:
        from applefoundationmodels.exceptions import FoundationModelsError

        kwargs: dict[str, Any] = {}
        if options.max_tokens is not None:
            kwargs["max_tokens"] = options.max_tokens
        if options.temperature is not None:
            kwargs["temperature"] = options.temperature
        if options.top_p is not None:
            # The Python binding exposes no nucleus-sampling parameter.
            logger.debug("apple.respond.top_p_ignored top_p={}", options.top_p)

        try:
            response = await asyncio.to_thread(self._session.generate, prompt, **kwargs)
        except FoundationModelsError as exc:
            raise GenerationError(str(exc) or type(exc).__name__, details=type(exc).__name__) from exc
        return str(response.text)


class AppleModel:
    """System language model exposed by Apple Intelligence."""

    name = "apple"

    def __init__(self, settings: Settings | None = None) -> None:
        self._languages = list(settings.supported_languages) if settings is not None else []

    def availability(self) -> Availability:
        if platform.system() != "Darwin":
            return Availability.unavailable(AvailabilityReason.UNSUPPORTED_OS)
        try:
            from applefoundationmodels import Session, apple_intelligence_available
        except ImportError:
            logger.warning("apple.binding.missing package=apple-foundation-models")
            return Availability.unavailable(AvailabilityReason.UNSUPPORTED_OS)

        if platform.machine().lower() != "arm64":
            return Availability.unavailable(AvailabilityReason.DEVICE_NOT_ELIGIBLE)
        major, _minor, _patch = parse_macos_version()
        if major < MIN_MACOS_MAJOR:
            return Availability.unavailable(AvailabilityReason.UNSUPPORTED_OS_VERSION)

        if apple_intelligence_available():
            return Availability.AVAILABLE
        reason = Session.get_availability_reason()
        logger.info("apple.unavailable reason={}", reason)
        return Availability.unavailable(classify_reason(str(reason)))

    def supported_languages(self) -> list[str]:
        return list(self._languages)

    def new_session(self, instructions: str | None = None) -> AppleSession:
        return AppleSession(instructions)
