"""
Per-conversant session state.

- models: the Session record and media references
- inbound: fragment queue with atomic drain
- tool_calls: tool-call coordinator state machine
- history: token-budgeted history ledger
- store: concurrent session registry
"""

from .history import HistoryLedger
from .inbound import Fragment, InboundQueue, coalesce
from .models import MediaReference, Session, Turn
from .store import SessionStore
from .tool_calls import ToolCallCoordinator, ToolCallState

__all__ = [
    "Fragment",
    "HistoryLedger",
    "InboundQueue",
    "MediaReference",
    "Session",
    "SessionStore",
    "ToolCallCoordinator",
    "ToolCallState",
    "Turn",
    "coalesce",
]
