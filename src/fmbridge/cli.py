"""fmbridge command line."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer

from fmbridge.backends import build_model
from fmbridge.channel import MethodChannel
from fmbridge.config import Settings, get_settings
from fmbridge.dispatcher import Dispatcher, MethodCall, Reply
from fmbridge.errors import ConfigurationError
from fmbridge.logging_utils import LogProfile, configure_logging

app = typer.Typer(name="fmbridge", help="Bridge to Apple's on-device language model.", add_completion=False)

BACKEND_HELP = "Model backend ('apple' or 'echo'); defaults to FMBRIDGE_BACKEND"


def _build_dispatcher(backend: str | None, *, profile: LogProfile = "cli") -> Dispatcher:
    settings: Settings = get_settings(backend=backend)
    configure_logging(profile=profile, level=settings.log_level)
    try:
        model = build_model(settings.backend, settings)
    except ConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(2) from exc
    return Dispatcher(model, settings=settings)


def _call(dispatcher: Dispatcher, method: str, arguments: dict[str, Any] | None = None) -> Reply:
    async def _run() -> Reply:
        async with dispatcher:
            return await dispatcher.dispatch(MethodCall(method, arguments))

    return asyncio.run(_run())


def _emit(reply: Reply) -> None:
    if reply.error is not None:
        typer.echo(json.dumps(reply.error.to_payload(), ensure_ascii=False), err=True)
        raise typer.Exit(1)
    if isinstance(reply.value, str):
        typer.echo(reply.value)
        return
    typer.echo(json.dumps(reply.value, ensure_ascii=False, indent=2))


@app.command()
def status(
    backend: str | None = typer.Option(None, "--backend", "-b", help=BACKEND_HELP),
) -> None:
    """Show whether the model can be used on this host."""
    _emit(_call(_build_dispatcher(backend), "getAvailabilityStatus"))


@app.command()
def capabilities(
    backend: str | None = typer.Option(None, "--backend", "-b", help=BACKEND_HELP),
) -> None:
    """Show the model capability report."""
    _emit(_call(_build_dispatcher(backend), "getModelCapabilities"))


@app.command()
def call(
    method: str = typer.Argument(..., help="Operation name, e.g. summarizeText"),
    args: str = typer.Option("{}", "--args", "-a", help="Arguments as a JSON object"),
    backend: str | None = typer.Option(None, "--backend", "-b", help=BACKEND_HELP),
) -> None:
    """Run one operation and print its result as JSON."""
    try:
        arguments = json.loads(args)
    except ValueError as exc:
        typer.echo(f"--args is not valid JSON: {exc}", err=True)
        raise typer.Exit(2) from exc
    _emit(_call(_build_dispatcher(backend), method, arguments))


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Prompt text"),
    instructions: str | None = typer.Option(None, "--instructions", "-i", help="System instructions"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Cap on generated tokens"),
    temperature: float | None = typer.Option(None, "--temperature", help="Sampling temperature"),
    top_p: float | None = typer.Option(None, "--top-p", help="Nucleus sampling threshold in [0, 1]"),
    backend: str | None = typer.Option(None, "--backend", "-b", help=BACKEND_HELP),
) -> None:
    """Send one prompt to a fresh session."""
    arguments: dict[str, Any] = {
        "prompt": prompt,
        "instructions": instructions,
        "maxTokens": max_tokens,
        "temperature": temperature,
        "topP": top_p,
    }
    arguments = {key: value for key, value in arguments.items() if value is not None}
    _emit(_call(_build_dispatcher(backend), "ask", arguments))


@app.command()
def serve(
    backend: str | None = typer.Option(None, "--backend", "-b", help=BACKEND_HELP),
) -> None:
    """Serve the JSON-lines method channel on stdin/stdout."""
    channel = MethodChannel(_build_dispatcher(backend, profile="default"))
    asyncio.run(channel.start())
