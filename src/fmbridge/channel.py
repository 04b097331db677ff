"""Newline-delimited JSON method channel over stdio."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, BinaryIO, TextIO

from loguru import logger
from pydantic import BaseModel, ValidationError

from fmbridge.dispatcher import Dispatcher, MethodCall, Reply
from fmbridge.errors import MalformedRequestError


class ChannelRequest(BaseModel):
    """One inbound call envelope."""

    id: int | str | None = None
    method: str
    arguments: Any = None


def _decode(line: str) -> ChannelRequest:
    try:
        return ChannelRequest.model_validate_json(line)
    except ValidationError as exc:
        raise MalformedRequestError(f"Malformed request: {exc.error_count()} validation error(s)") from exc


def _request_id(line: str) -> int | str | None:
    try:
        payload = json.loads(line)
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("id"), (int, str)):
        return payload["id"]
    return None


def encode_reply(request_id: int | str | None, reply: Reply) -> str:
    return json.dumps({"id": request_id, **reply.to_payload()}, ensure_ascii=False)


class MethodChannel:
    """Read call envelopes line by line and write one reply line per call.

    Each request runs in its own task so calls on different sessions proceed in
    parallel; replies are written in completion order under one lock.
    """

    name = "stdio"

    def __init__(
        self,
        dispatcher: Dispatcher,
        *,
        stdin: BinaryIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self._stdin = stdin or sys.stdin.buffer
        self._stdout = stdout or sys.stdout
        self._write_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Serve until end of input, then drain in-flight calls and shut down."""
        self._running = True
        logger.info("channel.start name={}", self.name)
        try:
            while self._running:
                line = await asyncio.to_thread(self._stdin.readline)
                if not line:
                    break
                if not line.strip():
                    continue
                task = asyncio.create_task(self._serve_line(line))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
            if self._tasks:
                await asyncio.gather(*self._tasks)
        finally:
            await self.stop()

    async def stop(self) -> None:
        if not self._running and not self._tasks:
            return
        self._running = False
        await self.dispatcher.close()
        logger.info("channel.stop name={} pending={}", self.name, len(self._tasks))

    async def handle_line(self, line: bytes | str) -> str:
        """Decode one request line, dispatch it and return the encoded reply."""
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as exc:
                logger.warning("channel.malformed message=invalid utf-8 at byte {}", exc.start)
                return encode_reply(None, Reply(error=MalformedRequestError("Malformed request: invalid UTF-8")))
        try:
            request = _decode(line)
        except MalformedRequestError as exc:
            logger.warning("channel.malformed message={}", exc.message)
            return encode_reply(_request_id(line), Reply(error=exc))
        reply = await self.dispatcher.dispatch(MethodCall(request.method, request.arguments))
        return encode_reply(request.id, reply)

    async def _serve_line(self, line: bytes) -> None:
        encoded = await self.handle_line(line)
        if not self._running:
            # Shut down while the call was in flight; nobody is waiting for it.
            logger.debug("channel.reply.dropped")
            return
        async with self._write_lock:
            self._stdout.write(encoded + "\n")
            self._stdout.flush()
