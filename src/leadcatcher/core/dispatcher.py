"""
Batch Dispatcher: coalesces bursts of inbound fragments into single turns.

A periodic sweep drains every session whose queue has gone quiet. Each drain
runs as its own task so one slow completion never holds up other sessions.
"""

import asyncio
import time
from typing import Callable, List, Optional, Set

from leadcatcher.channels.base import MessagingChannel
from leadcatcher.core.conversation import ConversationProcessor
from leadcatcher.logger import get_logger
from leadcatcher.messages import RESET_ACKNOWLEDGEMENT, get_message
from leadcatcher.session.inbound import coalesce
from leadcatcher.session.models import Session
from leadcatcher.session.store import SessionStore

logger = get_logger(__name__)


class BatchDispatcher:
    """
    Drains inbound queues once a conversant stops typing.

    ``quiet_window`` applies to direct ``process_queue`` calls and
    ``sweep_quiet_window`` to the periodic sweep.
    """

    def __init__(
        self,
        store: SessionStore,
        processor: ConversationProcessor,
        channel: MessagingChannel,
        tick_interval: float = 30.0,
        quiet_window: float = 60.0,
        sweep_quiet_window: float = 20.0,
        reset_keyword: str = "reset",
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.processor = processor
        self.channel = channel
        self.tick_interval = tick_interval
        self.quiet_window = quiet_window
        self.sweep_quiet_window = sweep_quiet_window
        self.reset_keyword = reset_keyword.lower()
        self.clock = clock
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._drains: Set[asyncio.Task] = set()
        self._last_sweep_at: Optional[float] = None

    async def start(self):
        """Start the sweep loop."""
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"BatchDispatcher started (interval={self.tick_interval}s).")

    async def stop(self):
        """Stop the sweep loop and cancel drains still running."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        pending = list(self._drains)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.info("BatchDispatcher stopped.")

    def get_status(self) -> dict:
        return {
            "running": self._running,
            "tick_interval": self.tick_interval,
            "quiet_window": self.quiet_window,
            "sweep_quiet_window": self.sweep_quiet_window,
            "drains_in_flight": len(self._drains),
            "last_sweep_at": self._last_sweep_at,
        }

    def should_process_queue(self, session_id: str) -> bool:
        """Whether ``session_id`` has a queue that may be drained now."""
        session = self.store.get(session_id)
        if session is None:
            return False
        return session.is_dispatch_eligible(self.clock(), self.quiet_window)

    def sweep(self) -> List[asyncio.Task]:
        """Launch a drain for every session that has gone quiet."""
        now = self.clock()
        self._last_sweep_at = now
        launched = []

        def visit(session: Session):
            if not session.is_dispatch_eligible(now, self.sweep_quiet_window):
                return
            logger.debug(f"Sweep found quiet queue for {session.id}")
            task = asyncio.create_task(
                self.process_queue(session.id, quiet_window=self.sweep_quiet_window)
            )
            self._drains.add(task)
            task.add_done_callback(self._drains.discard)
            launched.append(task)

        self.store.for_each(visit)
        return launched

    async def process_queue(self, session_id: str, quiet_window: Optional[float] = None) -> bool:
        """
        Drain one session's queue and deliver the reply.

        Returns True when a turn was dispatched, False when the session was
        not eligible or had nothing queued.
        """
        session = self.store.get(session_id)
        if session is None:
            return False

        window = self.quiet_window if quiet_window is None else quiet_window
        if not session.try_begin_dispatch(self.clock(), window):
            return False

        try:
            with session.lock:
                fragments = session.inbound.drain()
                combined = coalesce(fragments)
                is_reset = combined.strip().lower() == self.reset_keyword
                if is_reset:
                    # Under the session lock so no fragment lands in the old record.
                    self.store.delete(session.id)

            if not fragments:
                return False

            if is_reset:
                logger.info(f"Session reset requested by {session.id}")
                await self.channel.send_message(session.id, RESET_ACKNOWLEDGEMENT)
                return True

            logger.info(f"Processing {len(fragments)} queued message(s) for {session.id}")
            reply = await self.processor.process_message(session, combined)
            if reply:
                sent = await self.channel.send_message(session.id, reply)
                if not sent:
                    logger.error(f"Failed to deliver reply to {session.id}")
            return True
        except Exception as e:
            logger.error(f"Error processing queue for {session.id}: {e}")
            await self._send_apology(session)
            return False
        finally:
            session.end_dispatch()

    # -- Internal ------------------------------------------------------------

    async def _run_loop(self):
        """Main tick loop -- sweeps every tick_interval seconds."""
        while self._running:
            try:
                await self._tick()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in dispatcher tick: {e}")

            try:
                await asyncio.sleep(self.tick_interval)
            except asyncio.CancelledError:
                break

    async def _tick(self):
        self.sweep()

    async def _send_apology(self, session: Session):
        try:
            await self.channel.send_message(
                session.id, get_message(session.language, "errors", "general")
            )
        except Exception as e:
            logger.error(f"Failed to send error message to {session.id}: {e}")
