from __future__ import annotations

import asyncio
import threading

import pytest

from fmbridge.registry import SessionRegistry, new_session_id

from .conftest import FakeModel


def _registry() -> SessionRegistry:
    return SessionRegistry(FakeModel().new_session)


def test_new_session_id_is_uppercase_uuid() -> None:
    session_id = new_session_id()
    assert len(session_id) == 36
    assert session_id == session_id.upper()


@pytest.mark.asyncio
async def test_create_then_get_returns_same_handle() -> None:
    registry = _registry()
    session_id = await registry.create("be brief")

    first = await registry.get(session_id)
    second = await registry.get(session_id)

    assert first is not None
    assert first is second
    assert first.instructions == "be brief"
    assert session_id in registry


@pytest.mark.asyncio
async def test_remove_makes_identifier_unknown() -> None:
    registry = _registry()
    session_id = await registry.create(None)

    await registry.remove(session_id)

    assert await registry.get(session_id) is None
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_remove_unknown_identifier_is_noop() -> None:
    registry = _registry()
    kept = await registry.create("x")

    await registry.remove("no-such-session")
    await registry.remove("no-such-session")

    assert await registry.get(kept) is not None


@pytest.mark.asyncio
async def test_clear_drops_every_session() -> None:
    registry = _registry()
    ids = [await registry.create(f"s{idx}") for idx in range(3)]

    assert await registry.clear() == 3

    for session_id in ids:
        assert await registry.get(session_id) is None
    assert await registry.clear() == 0


@pytest.mark.asyncio
async def test_concurrent_creates_yield_distinct_identifiers() -> None:
    registry = _registry()

    ids = await asyncio.gather(*(registry.create(str(idx)) for idx in range(50)))

    assert len(set(ids)) == 50
    assert len(registry) == 50


@pytest.mark.asyncio
async def test_create_retries_on_identifier_collision(monkeypatch: pytest.MonkeyPatch) -> None:
    registry = _registry()
    issued = iter(["SAME", "SAME", "OTHER"])
    monkeypatch.setattr("fmbridge.registry.new_session_id", lambda: next(issued))

    first = await registry.create(None)
    second = await registry.create(None)

    assert (first, second) == ("SAME", "OTHER")


@pytest.mark.asyncio
async def test_removed_identifiers_are_not_reissued() -> None:
    registry = _registry()
    first = await registry.create(None)
    await registry.remove(first)

    later = {await registry.create(None) for _ in range(20)}

    assert first not in later


@pytest.mark.asyncio
async def test_session_factory_runs_in_a_worker_thread() -> None:
    model = FakeModel()
    factory_threads: list[int] = []

    def _factory(instructions: str | None):
        factory_threads.append(threading.get_ident())
        return model.new_session(instructions)

    registry = SessionRegistry(_factory)
    await registry.create("ctx")

    assert factory_threads
    assert factory_threads[0] != threading.get_ident()
