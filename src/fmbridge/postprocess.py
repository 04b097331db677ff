"""Turn free model text into structured results without ever raising."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass

from fmbridge.types import JSONValue

JSON_FENCE = "```json"
FENCE = "```"
PARSE_FAILURE_MESSAGE = "Failed to parse JSON"


@dataclass(frozen=True)
class RawText:
    """Model output that could not be parsed as JSON."""

    text: str


def split_lines(text: str, limit: int | None = None) -> list[str]:
    """Split on newlines, trim each line and drop blanks; keep at most ``limit`` lines."""
    # Whitespace-only lines count as empty and are never returned.
    lines = [stripped for line in text.split("\n") if (stripped := line.strip())]
    if limit is not None:
        return lines[: max(limit, 0)]
    return lines


def strip_code_fences(text: str) -> str:
    cleaned = text.strip().replace(JSON_FENCE, "").replace(FENCE, "")
    return cleaned.strip()


def salvage_json(text: str) -> JSONValue | RawText:
    """Sanitize then parse; the original text comes back as ``RawText`` on failure."""
    try:
        return json.loads(strip_code_fences(text))
    except (ValueError, RecursionError):
        return RawText(text)


def json_or_error(text: str) -> JSONValue:
    parsed = salvage_json(text)
    if isinstance(parsed, RawText):
        return {"error": PARSE_FAILURE_MESSAGE, "raw_content": parsed.text}
    return parsed


def uniform_distribution(categories: Iterable[str]) -> dict[str, float]:
    unique = list(dict.fromkeys(categories))
    if not unique:
        return {}
    weight = 1.0 / len(unique)
    return {category: weight for category in unique}


def classification_or_uniform(text: str, categories: list[str]) -> dict[str, float]:
    """Parsed ``{category: score}`` map, or equal weights when the output is unusable."""
    parsed = salvage_json(text)
    if not isinstance(parsed, dict) or not parsed:
        return uniform_distribution(categories)
    scores: dict[str, float] = {}
    for key, value in parsed.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return uniform_distribution(categories)
        scores[str(key)] = float(value)
    return scores
