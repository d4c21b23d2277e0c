"""Per-editor-session render schedulers."""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Optional

from ..config import get_config
from ..services.render_scheduler import RenderScheduler

logger = logging.getLogger(__name__)


class SessionManager:
    """Keeps one RenderScheduler per editor session.

    The registry is bounded: sessions idle for longer than `idle_seconds` are
    dropped, and beyond `max_sessions` the least recently used one is evicted.
    """

    def __init__(self, max_sessions: Optional[int] = None, idle_seconds: Optional[float] = None):
        """
        Initialize session manager.

        Args:
            max_sessions: Sessions kept at once (default from config)
            idle_seconds: Idle time before a session is dropped (default from config)
        """
        self.max_sessions = max_sessions
        self.idle_seconds = idle_seconds
        self._schedulers: OrderedDict[str, RenderScheduler] = OrderedDict()
        self._last_used: dict[str, float] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._schedulers)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._schedulers

    def _limits(self) -> tuple[int, float]:
        config = get_config()
        max_sessions = self.max_sessions if self.max_sessions is not None else config.max_sessions
        idle = self.idle_seconds if self.idle_seconds is not None else config.session_idle_seconds
        return max(1, max_sessions), idle

    def _pop(self, session_id: str) -> Optional[RenderScheduler]:
        self._last_used.pop(session_id, None)
        return self._schedulers.pop(session_id, None)

    async def get(self, session_id: str) -> RenderScheduler:
        """Get or create the scheduler for a session, evicting stale ones."""
        max_sessions, idle_seconds = self._limits()
        evicted = []

        async with self._lock:
            now = time.monotonic()
            for other_id, scheduler in list(self._schedulers.items()):
                if other_id == session_id or scheduler.busy:
                    continue
                if now - self._last_used[other_id] >= idle_seconds:
                    evicted.append(self._pop(other_id))

            scheduler = self._schedulers.get(session_id)
            if scheduler is None:
                config = get_config()
                scheduler = RenderScheduler(
                    debounce_seconds=config.debounce_seconds,
                    max_workers=config.max_workers,
                )
                self._schedulers[session_id] = scheduler
            self._schedulers.move_to_end(session_id)
            self._last_used[session_id] = now

            while len(self._schedulers) > max_sessions:
                oldest_id = next(iter(self._schedulers))
                evicted.append(self._pop(oldest_id))

        if evicted:
            logger.debug("Evicted %d render sessions, %d remain", len(evicted), len(self._schedulers))
        for stale in evicted:
            await stale.cancel()
        return scheduler

    async def close(self, session_id: str) -> bool:
        """Cancel and forget a session. Returns False if it did not exist."""
        async with self._lock:
            scheduler = self._pop(session_id)
        if scheduler is None:
            return False
        await scheduler.cancel()
        return True

    async def cancel_all(self):
        """Cancel every session's render in flight."""
        for session_id in list(self._schedulers.keys()):
            await self.close(session_id)


# Global session manager instance
session_manager = SessionManager()
