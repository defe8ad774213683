"""
Per-conversant buffer of inbound message fragments awaiting coalescing.
"""

import threading
import time
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Fragment:
    text: str
    arrived_at: float


class InboundQueue:
    """FIFO of fragments with an atomic swap-and-clear drain."""

    def __init__(self):
        self._items: List[Fragment] = []
        self._lock = threading.Lock()

    def append(self, text: str, arrived_at: Optional[float] = None) -> Fragment:
        if arrived_at is None:
            arrived_at = time.time()
        fragment = Fragment(text=text, arrived_at=arrived_at)
        with self._lock:
            self._items.append(fragment)
        return fragment

    def drain(self) -> List[Fragment]:
        """Remove and return every queued fragment in arrival order."""
        with self._lock:
            items, self._items = self._items, []
        return items

    @property
    def last_arrival(self) -> Optional[float]:
        with self._lock:
            return self._items[-1].arrived_at if self._items else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __bool__(self) -> bool:
        return len(self) > 0


def coalesce(fragments: List[Fragment]) -> str:
    """Join fragments into one turn; every fragment is followed by a space."""
    return "".join(f"{fragment.text} " for fragment in fragments)
