"""
Tool-call coordinator: gates queue draining while a tool result is pending.
"""

from enum import Enum
from typing import Optional

from leadcatcher.errors import ToolCallStateError


class ToolCallState(str, Enum):
    IDLE = "idle"
    AWAITING_RESULT = "awaiting_result"


class ToolCallCoordinator:
    """
    Two-state machine: IDLE -> AWAITING_RESULT -> IDLE.

    The pending call id is held only while awaiting a result.
    """

    def __init__(self):
        self.state = ToolCallState.IDLE
        self.pending_call_id: Optional[str] = None

    @property
    def is_idle(self) -> bool:
        return self.state is ToolCallState.IDLE

    def begin(self, call_id: str) -> None:
        if self.state is not ToolCallState.IDLE:
            raise ToolCallStateError(
                f"Cannot start tool call {call_id}: "
                f"call {self.pending_call_id} is still awaiting its result"
            )
        self.state = ToolCallState.AWAITING_RESULT
        self.pending_call_id = call_id

    def complete(self) -> None:
        self.state = ToolCallState.IDLE
        self.pending_call_id = None
