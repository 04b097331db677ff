"""Application-level exception types for fmbridge."""

from __future__ import annotations

from typing import Any

INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
GENERATION_ERROR = "GENERATION_ERROR"
UNKNOWN_ERROR = "UNKNOWN_ERROR"
NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
MALFORMED_REQUEST = "MALFORMED_REQUEST"


class FMBridgeError(Exception):
    """Base exception for fmbridge."""


class ConfigurationError(FMBridgeError):
    """Raised when settings do not describe a usable bridge."""


class BridgeError(FMBridgeError):
    """Error delivered across the call boundary as a stable code plus message."""

    code: str = UNKNOWN_ERROR

    def __init__(self, message: str, *, code: str | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class InvalidArgumentsError(BridgeError):
    """Raised when a required argument is missing or has the wrong type."""

    code = INVALID_ARGUMENTS

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} missing")
        self.field = field


class UnavailableError(BridgeError):
    """Raised when the on-device model cannot be used on this host."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message, code=code)


class GenerationError(BridgeError):
    """Raised when the model framework fails during inference."""

    code = GENERATION_ERROR


class UnknownBridgeError(BridgeError):
    """Catch-all for failures the dispatcher does not recognize."""

    code = UNKNOWN_ERROR


class MethodNotImplementedError(BridgeError):
    """Raised for method names outside the operation catalogue."""

    code = NOT_IMPLEMENTED

    def __init__(self, method: str) -> None:
        super().__init__(f"Method not implemented: {method}")
        self.method = method


class MalformedRequestError(BridgeError):
    """Raised by the channel when an inbound line is not a valid call envelope."""

    code = MALFORMED_REQUEST
