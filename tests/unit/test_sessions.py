"""Tests for the bounded render session registry."""

import asyncio
from types import SimpleNamespace

import pytest

import tileposter.config as config_module
from tileposter.api import sessions
from tileposter.api.sessions import SessionManager
from tileposter.models.poster import GridShape, PosterProject


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    monkeypatch.setenv("TILEPOSTER_DEBOUNCE_SECONDS", "0")
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def clock(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(sessions, "time", SimpleNamespace(monotonic=lambda: now[0]))
    return now


class TestSessionManager:
    """Test session creation and eviction."""

    def test_same_id_reuses_scheduler(self):
        manager = SessionManager(max_sessions=4, idle_seconds=60)

        async def scenario():
            return await manager.get("a"), await manager.get("a")

        first, second = asyncio.run(scenario())
        assert first is second
        assert len(manager) == 1

    def test_scheduler_uses_config(self):
        manager = SessionManager()
        scheduler = asyncio.run(manager.get("a"))
        assert scheduler.debounce_seconds == 0

    def test_registry_is_bounded(self, photo_image):
        manager = SessionManager(max_sessions=4, idle_seconds=3600)
        project = PosterProject(grid=GridShape(rows=1, cols=1))

        async def scenario():
            for i in range(20):
                scheduler = await manager.get(f"editor-{i}")
                assert await scheduler.render(photo_image, project) is not None

        asyncio.run(scenario())
        assert len(manager) == 4
        assert "editor-0" not in manager
        assert all(f"editor-{i}" in manager for i in range(16, 20))

    def test_least_recently_used_evicted_first(self):
        manager = SessionManager(max_sessions=3, idle_seconds=3600)

        async def scenario():
            for session_id in ("a", "b", "c", "a", "d"):
                await manager.get(session_id)

        asyncio.run(scenario())
        assert "b" not in manager
        assert all(session_id in manager for session_id in ("a", "c", "d"))

    def test_idle_sessions_dropped(self, clock):
        manager = SessionManager(max_sessions=10, idle_seconds=60)

        async def scenario():
            await manager.get("old")
            clock[0] += 30
            await manager.get("recent")
            clock[0] += 45
            await manager.get("new")

        asyncio.run(scenario())
        assert "old" not in manager
        assert "recent" in manager
        assert "new" in manager

    def test_close(self):
        manager = SessionManager(max_sessions=2, idle_seconds=60)

        async def scenario():
            await manager.get("a")
            return await manager.close("a"), await manager.close("a")

        assert asyncio.run(scenario()) == (True, False)
        assert len(manager) == 0
