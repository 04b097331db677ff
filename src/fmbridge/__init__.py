"""fmbridge - Apple on-device language model bridge."""

from .availability import Availability, AvailabilityGate, AvailabilityReason
from .dispatcher import Dispatcher, MethodCall, Reply
from .errors import BridgeError
from .options import GenerationOptions
from .registry import SessionRegistry

__version__ = "0.1.0"

__all__ = [
    "Availability",
    "AvailabilityGate",
    "AvailabilityReason",
    "BridgeError",
    "Dispatcher",
    "GenerationOptions",
    "MethodCall",
    "Reply",
    "SessionRegistry",
]
