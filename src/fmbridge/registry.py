"""Concurrency-safe store of open model sessions."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from typing import TypeAlias

from loguru import logger

from fmbridge.backends.base import ModelSession

SessionFactory: TypeAlias = Callable[[str | None], ModelSession]


def new_session_id() -> str:
    return str(uuid.uuid4()).upper()


class SessionRegistry:
    """Map session identifiers to handles; callers only ever see the identifier.

    Every mutation runs under one ``asyncio.Lock``. The lock is never held while a
    generation call is in flight, and removing an entry does not cancel calls that
    already resolved its handle.
    """

    def __init__(self, factory: SessionFactory) -> None:
        self._factory = factory
        self._sessions: dict[str, ModelSession] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    async def create(self, instructions: str | None) -> str:
        session = await asyncio.to_thread(self._factory, instructions)
        async with self._lock:
            session_id = new_session_id()
            while session_id in self._sessions:
                session_id = new_session_id()
            self._sessions[session_id] = session
        logger.info("session.open session_id={} instructions={}", session_id, instructions is not None)
        return session_id

    async def get(self, session_id: str) -> ModelSession | None:
        async with self._lock:
            return self._sessions.get(session_id)

    async def remove(self, session_id: str) -> None:
        async with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info("session.close session_id={}", session_id)

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        logger.info("session.clear count={}", count)
        return count
