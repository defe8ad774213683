"""Session registry keyed by conversant id."""

import time
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from leadcatcher.logger import get_logger

from .models import MediaReference, Session

logger = get_logger(__name__)


class SessionStore:
    """
    Thread-safe map of conversant id to Session with lazy creation.

    The store lock only covers the key space (insert-if-absent, removal and
    snapshots). Work on a single session uses that session's own lock.
    """

    def __init__(
        self,
        system_instructions: str,
        default_language: str = "en",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.system_instructions = system_instructions
        self.default_language = default_language
        self.clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = Lock()

    def _new_session(self, session_id: str) -> Session:
        return Session(
            id=session_id,
            history=[{"role": "system", "content": self.system_instructions}],
            last_activity_at=self.clock(),
            language=self.default_language,
            lead_fields={"phone": session_id},
        )

    def get_or_create(self, session_id: str) -> Session:
        """Return the session for ``session_id``, creating it on first touch."""
        created = False
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = self._new_session(session_id)
                self._sessions[session_id] = session
                created = True
        if created:
            logger.info(f"Creating new session for user {session_id}")
        else:
            session.touch(self.clock())
        return session

    def get(self, session_id: str) -> Optional[Session]:
        """Return an existing session (refreshing its activity time) or None."""
        with self._lock:
            session = self._sessions.get(session_id)
        if session is not None:
            session.touch(self.clock())
        return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        with session.lock:
            session.closed = True
        return True

    def remove_if(self, session_id: str, predicate: Callable[[Session], bool]) -> bool:
        """
        Delete a session only if ``predicate`` holds while its lock is held.

        Lets a sweep decide and delete without racing a dispatch that claims
        the same session.
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            return False

        with session.lock:
            if not predicate(session):
                return False
            with self._lock:
                if self._sessions.get(session_id) is session:
                    del self._sessions[session_id]
            session.closed = True
        return True

    def for_each(self, visitor: Callable[[Session], Any]) -> None:
        """Call ``visitor`` on a snapshot of all sessions without touching them."""
        for session in self.snapshot():
            visitor(session)

    def snapshot(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    # -- Inbound and profile helpers ------------------------------------------

    def enqueue(self, session_id: str, text: str) -> Session:
        """Append an inbound fragment; never blocks on an in-flight dispatch."""
        while True:
            session = self.get_or_create(session_id)
            with session.lock:
                # A reset may have closed this record between lookup and append.
                if not session.closed:
                    session.enqueue(text, now=self.clock())
                    return session

    def add_media(self, session_id: str, media: MediaReference) -> None:
        while True:
            session = self.get_or_create(session_id)
            with session.lock:
                if not session.closed:
                    session.pending_media.append(media)
                    total = len(session.pending_media)
                    break
        logger.info(
            f"Added media file {media.media_id} to session {session_id}, total files: {total}"
        )

    def set_human_takeover(self, session_id: str, enabled: bool) -> None:
        """Entry point for an operator handoff; dispatch pauses while set."""
        session = self.get_or_create(session_id)
        with session.lock:
            session.human_takeover = enabled
        logger.info(f"Human takeover {'enabled' if enabled else 'disabled'} for {session_id}")
