"""Framework-neutral data aliases."""

from __future__ import annotations

from typing import Any, TypeAlias

JSONValue: TypeAlias = Any
Arguments: TypeAlias = dict[str, Any]
