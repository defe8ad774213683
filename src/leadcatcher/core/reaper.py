"""
Idle Reaper: drops sessions nobody has talked to for a long time.
"""

import asyncio
import time
from typing import Callable, List, Optional

from leadcatcher.logger import get_logger
from leadcatcher.session.models import Session
from leadcatcher.session.store import SessionStore

logger = get_logger(__name__)


class IdleReaper:
    """Hourly sweep removing sessions idle past ``session_timeout``."""

    def __init__(
        self,
        store: SessionStore,
        interval_seconds: float = 3600.0,
        session_timeout: float = 86400.0,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.interval_seconds = interval_seconds
        self.session_timeout = session_timeout
        self.clock = clock
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._last_sweep_at: Optional[float] = None
        self._removed_total = 0

    async def start(self):
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            f"IdleReaper started (interval={self.interval_seconds}s, timeout={self.session_timeout}s)."
        )

    async def stop(self):
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("IdleReaper stopped.")

    def get_status(self) -> dict:
        return {
            "running": self._running,
            "interval_seconds": self.interval_seconds,
            "session_timeout": self.session_timeout,
            "last_sweep_at": self._last_sweep_at,
            "removed_total": self._removed_total,
        }

    def is_expired(self, session: Session, now: float) -> bool:
        if session.dispatch_in_flight:
            return False
        return now - session.last_activity_at > self.session_timeout

    def sweep(self) -> List[str]:
        """Remove every expired session and return the removed ids."""
        now = self.clock()
        self._last_sweep_at = now
        removed = []
        for session in self.store.snapshot():
            if self.store.remove_if(session.id, lambda s: self.is_expired(s, now)):
                logger.info(f"Removing inactive session for {session.id}")
                removed.append(session.id)
            elif session.dispatch_in_flight:
                logger.debug(f"Skipping busy session {session.id}")
        self._removed_total += len(removed)
        return removed

    async def _run_loop(self):
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                break

            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Idle session sweep failed: {e}")
