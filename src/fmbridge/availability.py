"""Availability gate for the on-device model."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

from loguru import logger


class AvailabilityReason(StrEnum):
    """Why the model cannot be used. ``UNAVAILABLE`` covers anything unrecognized."""

    APPLE_INTELLIGENCE_NOT_ENABLED = "APPLE_INTELLIGENCE_NOT_ENABLED"
    DEVICE_NOT_ELIGIBLE = "DEVICE_NOT_ELIGIBLE"
    MODEL_NOT_READY = "MODEL_NOT_READY"
    UNAVAILABLE = "UNAVAILABLE"
    UNSUPPORTED_OS_VERSION = "UNSUPPORTED_OS_VERSION"
    UNSUPPORTED_OS = "UNSUPPORTED_OS"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_REASON_MESSAGES: dict[AvailabilityReason, str] = {
    AvailabilityReason.APPLE_INTELLIGENCE_NOT_ENABLED: "Apple Intelligence is not enabled on this device.",
    AvailabilityReason.DEVICE_NOT_ELIGIBLE: "This device is not eligible for Apple Intelligence.",
    AvailabilityReason.MODEL_NOT_READY: "The language model is not yet ready. It may be downloading.",
    AvailabilityReason.UNAVAILABLE: "The language model is unavailable for an unknown reason.",
    AvailabilityReason.UNSUPPORTED_OS_VERSION: "Apple Foundation Models require macOS 26.0 or later.",
    AvailabilityReason.UNSUPPORTED_OS: "Apple Foundation Models are only available on macOS.",
}

# Checked in order; the first matching keyword wins.
_REASON_KEYWORDS: list[tuple[AvailabilityReason, tuple[str, ...]]] = [
    (AvailabilityReason.APPLE_INTELLIGENCE_NOT_ENABLED, ("not enabled", "notenabled", "disabled")),
    (AvailabilityReason.DEVICE_NOT_ELIGIBLE, ("not eligible", "noteligible", "ineligible")),
    (AvailabilityReason.MODEL_NOT_READY, ("not ready", "notready", "download")),
]


@dataclass(frozen=True)
class Availability:
    """Tagged availability outcome."""

    available: bool
    reason: AvailabilityReason | None = None

    AVAILABLE: ClassVar[Availability]

    @classmethod
    def unavailable(cls, reason: AvailabilityReason) -> Availability:
        return cls(available=False, reason=reason)

    @property
    def code(self) -> str | None:
        return None if self.reason is None else self.reason.value

    @property
    def message(self) -> str:
        if self.reason is None:
            return "Available"
        return self.reason.message

    def to_status(self) -> dict[str, object]:
        return {"available": self.available, "reason": self.message}


Availability.AVAILABLE = Availability(available=True)


def classify_reason(text: str) -> AvailabilityReason:
    """Map a backend's free-text unavailability reason onto the closed enumeration."""
    lowered = " ".join(str(text).lower().replace("_", " ").split())
    for reason, keywords in _REASON_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return reason
    return AvailabilityReason.UNAVAILABLE


class AvailabilityGate:
    """Query host capability lazily and remember the first failure for the process lifetime.

    A successful probe is never cached, so every check re-probes while the model
    is available. The first failure is stored and returned from then on without
    probing again, even if the host later becomes eligible.
    """

    def __init__(self, probe: Callable[[], Availability]) -> None:
        self._probe = probe
        self._cached_failure: Availability | None = None

    @property
    def cached(self) -> Availability | None:
        return self._cached_failure

    def check(self) -> Availability:
        if self._cached_failure is not None:
            return self._cached_failure

        try:
            result = self._probe()
        except Exception:
            logger.exception("availability.probe.error")
            result = Availability.unavailable(AvailabilityReason.UNAVAILABLE)

        if result.available:
            return result

        self._cached_failure = result
        logger.warning("availability.unavailable code={} message={}", result.code, result.message)
        return result
