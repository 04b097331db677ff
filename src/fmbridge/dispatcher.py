"""Translate generic method calls into model requests and structured replies."""

from __future__ import annotations

import asyncio
import platform
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from loguru import logger

from fmbridge.availability import AvailabilityGate
from fmbridge.backends.base import LanguageModel, ModelSession
from fmbridge.config import Settings, get_settings
from fmbridge.errors import (
    BridgeError,
    InvalidArgumentsError,
    MethodNotImplementedError,
    UnavailableError,
    UnknownBridgeError,
)
from fmbridge.options import GenerationOptions
from fmbridge.postprocess import classification_or_uniform, json_or_error, split_lines
from fmbridge.prompts import (
    DEFAULT_CATEGORIES,
    DEFAULT_STYLE,
    build_alternatives_prompt,
    build_classification_prompt,
    build_extraction_prompt,
    build_list_prompt,
    build_structured_prompt,
    build_suggestions_prompt,
    build_summary_prompt,
)
from fmbridge.registry import SessionRegistry
from fmbridge.types import Arguments

FAST_PATH_METHODS = frozenset({"getPlatformVersion", "isAvailable", "getAvailabilityStatus"})
DEFAULT_ALTERNATIVES = 3
DEFAULT_SUGGESTIONS = 5

Handler: TypeAlias = Callable[[Arguments], Awaitable[Any]]


@dataclass(frozen=True)
class MethodCall:
    """One call envelope: an operation name plus its argument bag."""

    method: str
    arguments: Any = None


@dataclass(frozen=True)
class Reply:
    """Outcome of one call: a value or a structured error, never both."""

    value: Any = None
    error: BridgeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_payload(self) -> dict[str, Any]:
        if self.error is not None:
            return {"error": self.error.to_payload()}
        return {"result": self.value}


def platform_version() -> str:
    mac_version = platform.mac_ver()[0]
    if mac_version:
        return f"macOS {mac_version}"
    return f"{platform.system()} {platform.release()}".strip()


def _argument_bag(arguments: Any) -> Arguments:
    if isinstance(arguments, Mapping):
        return dict(arguments)
    return {}


def _require_str(args: Arguments, field: str) -> str:
    value = args.get(field)
    if not isinstance(value, str):
        raise InvalidArgumentsError(field)
    return value


def _optional_str(args: Arguments, field: str) -> str | None:
    value = args.get(field)
    return value if isinstance(value, str) else None


def _optional_count(args: Arguments, field: str, default: int) -> int:
    value = args.get(field)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _optional_str_list(args: Arguments, field: str) -> list[str] | None:
    value = args.get(field)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        return None
    return list(value)


class Dispatcher:
    """Route one ``MethodCall`` through availability, validation, the model and post-processing."""

    def __init__(
        self,
        model: LanguageModel,
        *,
        settings: Settings | None = None,
        registry: SessionRegistry | None = None,
        gate: AvailabilityGate | None = None,
    ) -> None:
        self.model = model
        self.settings = settings or get_settings()
        self.registry = registry or SessionRegistry(model.new_session)
        self.gate = gate or AvailabilityGate(model.availability)
        self._handlers: dict[str, Handler] = {
            "openSession": self._open_session,
            "closeSession": self._close_session,
            "getModelCapabilities": self._capabilities,
            "ask": self._ask,
            "generateText": self._ask,
            "generateAlternatives": self._alternatives,
            "summarizeText": self._summarize,
            "extractInformation": self._extract,
            "classifyText": self._classify,
            "generateSuggestions": self._suggestions,
            "getStructuredData": self._structured,
            "getListOfString": self._list_of_string,
        }

    @property
    def methods(self) -> list[str]:
        return sorted(FAST_PATH_METHODS | self._handlers.keys())

    async def __aenter__(self) -> Dispatcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.registry.clear()

    async def dispatch(self, call: MethodCall) -> Reply:
        """Run ``call`` and fold every failure into a structured ``Reply``."""
        try:
            value = await self.handle(call)
        except BridgeError as exc:
            logger.warning("dispatch.error method={} code={} message={}", call.method, exc.code, exc.message)
            return Reply(error=exc)
        except Exception as exc:
            logger.exception("dispatch.unexpected method={}", call.method)
            return Reply(error=UnknownBridgeError(str(exc) or type(exc).__name__))
        return Reply(value=value)

    async def handle(self, call: MethodCall) -> Any:
        """Run ``call`` and return its result, raising ``BridgeError`` on failure."""
        logger.debug("dispatch.call method={}", call.method)
        if call.method in FAST_PATH_METHODS:
            return await self._answer_fast_path(call.method)

        availability = await asyncio.to_thread(self.gate.check)
        if not availability.available:
            raise UnavailableError(availability.code or "UNAVAILABLE", availability.message)

        handler = self._handlers.get(call.method)
        if handler is None:
            raise MethodNotImplementedError(call.method)
        return await handler(_argument_bag(call.arguments))

    async def _answer_fast_path(self, method: str) -> Any:
        if method == "getPlatformVersion":
            return platform_version()
        availability = await asyncio.to_thread(self.gate.check)
        if method == "isAvailable":
            return availability.available
        return availability.to_status()

    async def _open_session(self, args: Arguments) -> str:
        instructions = _require_str(args, "instructions")
        return await self.registry.create(instructions)

    async def _close_session(self, args: Arguments) -> None:
        session_id = _require_str(args, "sessionId")
        await self.registry.remove(session_id)

    async def _capabilities(self, _args: Arguments) -> dict[str, Any]:
        return {
            "maxInputTokens": self.settings.max_input_tokens,
            "maxOutputTokens": self.settings.max_output_tokens,
            "supportedLanguages": self.model.supported_languages(),
            "supportsStreaming": self.settings.supports_streaming,
            "supportsToolCalling": self.settings.supports_tool_calling,
            "version": self.settings.capabilities_version,
        }

    async def _ask(self, args: Arguments) -> str:
        prompt = _require_str(args, "prompt")
        return await self._run(prompt, args, instructions=_optional_str(args, "instructions"))

    async def _alternatives(self, args: Arguments) -> list[str]:
        prompt = _require_str(args, "prompt")
        count = _optional_count(args, "count", DEFAULT_ALTERNATIVES)
        raw = await self._run(build_alternatives_prompt(prompt, count), args)
        return split_lines(raw, count)

    async def _summarize(self, args: Arguments) -> str:
        text = _require_str(args, "text")
        style = _optional_str(args, "style") or DEFAULT_STYLE
        return await self._run(build_summary_prompt(text, style), args)

    async def _extract(self, args: Arguments) -> Any:
        text = _require_str(args, "text")
        fields = _optional_str_list(args, "fields")
        raw = await self._run(build_extraction_prompt(text, fields), args)
        return json_or_error(raw)

    async def _classify(self, args: Arguments) -> dict[str, float]:
        text = _require_str(args, "text")
        categories = _optional_str_list(args, "categories")
        if categories is None:
            categories = list(DEFAULT_CATEGORIES)
        raw = await self._run(build_classification_prompt(text, categories), args)
        return classification_or_uniform(raw, categories)

    async def _suggestions(self, args: Arguments) -> list[str]:
        context = _require_str(args, "context")
        max_suggestions = _optional_count(args, "maxSuggestions", DEFAULT_SUGGESTIONS)
        raw = await self._run(build_suggestions_prompt(context, max_suggestions), args)
        return split_lines(raw, max_suggestions)

    async def _structured(self, args: Arguments) -> Any:
        prompt = _require_str(args, "prompt")
        raw = await self._run(build_structured_prompt(prompt), args)
        return json_or_error(raw)

    async def _list_of_string(self, args: Arguments) -> list[str]:
        prompt = _require_str(args, "prompt")
        raw = await self._run(build_list_prompt(prompt), args)
        return split_lines(raw)

    async def _resolve_session(self, session_id: Any, instructions: str | None) -> ModelSession:
        if isinstance(session_id, str):
            existing = await self.registry.get(session_id)
            if existing is not None:
                return existing
            logger.warning("session.missing session_id={} fallback=anonymous", session_id)
        return await asyncio.to_thread(self.model.new_session, instructions)

    async def _run(self, prompt: str, args: Arguments, *, instructions: str | None = None) -> str:
        session = await self._resolve_session(args.get("sessionId"), instructions)
        options = GenerationOptions.from_arguments(args)
        logger.debug("model.respond backend={} options={}", self.model.name, options.as_kwargs())
        try:
            return await session.respond(prompt, options)
        except BridgeError:
            raise
        except Exception as exc:
            logger.exception("model.respond.error backend={}", self.model.name)
            raise UnknownBridgeError(str(exc) or type(exc).__name__) from exc
