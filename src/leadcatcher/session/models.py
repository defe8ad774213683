"""Core data structures for per-conversant session state."""

import time
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Dict, List, Optional

from .inbound import InboundQueue
from .tool_calls import ToolCallCoordinator, ToolCallState

Turn = Dict[str, Any]


@dataclass(frozen=True)
class MediaReference:
    """A media attachment the channel holds for us, not yet transferred."""

    media_id: str
    mime_type: str


@dataclass
class Session:
    """Conversation state for one conversant, keyed by the channel's id."""

    id: str
    history: List[Turn] = field(default_factory=list)
    last_activity_at: float = field(default_factory=time.time)
    language: str = "en"
    pending_media: List[MediaReference] = field(default_factory=list)
    lead_fields: Dict[str, Any] = field(default_factory=dict)
    inbound: InboundQueue = field(default_factory=InboundQueue)
    dispatch_in_flight: bool = False
    tool_calls: ToolCallCoordinator = field(default_factory=ToolCallCoordinator)
    human_takeover: bool = False
    closed: bool = False
    lock: RLock = field(default_factory=RLock, repr=False)

    @property
    def tool_call_state(self) -> ToolCallState:
        return self.tool_calls.state

    def touch(self, now: Optional[float] = None) -> None:
        self.last_activity_at = now if now is not None else time.time()

    def enqueue(self, text: str, now: Optional[float] = None) -> None:
        self.inbound.append(text, arrived_at=now)

    def is_dispatch_eligible(self, now: float, quiet_window: float) -> bool:
        """
        Whether the inbound queue may be drained right now.

        Requires a non-empty queue, no dispatch in flight, no pending tool
        result, no human takeover, and a quiet period since the last fragment.
        """
        with self.lock:
            if self.closed or self.dispatch_in_flight or self.human_takeover:
                return False
            if not self.tool_calls.is_idle:
                return False
            last_arrival = self.inbound.last_arrival
            if last_arrival is None:
                return False
            return now - last_arrival > quiet_window

    def try_begin_dispatch(self, now: float, quiet_window: float) -> bool:
        """Atomically check eligibility and claim the session for a drain."""
        with self.lock:
            if not self.is_dispatch_eligible(now, quiet_window):
                return False
            self.dispatch_in_flight = True
            return True

    def end_dispatch(self) -> None:
        with self.lock:
            self.dispatch_in_flight = False
