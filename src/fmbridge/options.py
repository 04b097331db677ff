"""Generation options read from a call's argument bag."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling parameters; ``None`` means the framework default."""

    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any]) -> GenerationOptions:
        """Read ``maxTokens``, ``temperature`` and ``topP``, ignoring values of the wrong type."""
        max_tokens = _as_int(arguments.get("maxTokens"))
        if max_tokens is not None and max_tokens <= 0:
            max_tokens = None
        temperature = _as_float(arguments.get("temperature"))
        top_p = _as_float(arguments.get("topP"))
        if top_p is not None and not 0.0 <= top_p <= 1.0:
            top_p = None
        return cls(max_tokens=max_tokens, temperature=temperature, top_p=top_p)

    @property
    def is_default(self) -> bool:
        return not self.as_kwargs()

    def as_kwargs(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}
