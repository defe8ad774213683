"""
Base classes for messaging channel drivers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional

from leadcatcher.logger import get_logger

logger = get_logger(__name__)


@dataclass
class InboundMessage:
    """A single message received from a channel, normalized across platforms."""

    id: str
    sender_id: str
    platform: str
    type: str = "text"
    text: Optional[str] = None
    sender_name: Optional[str] = None
    timestamp: Optional[float] = None
    media_id: Optional[str] = None
    mime_type: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_media(self) -> bool:
        return self.media_id is not None


MessageCallback = Callable[[InboundMessage], Awaitable[None]]


class MessagingChannel(ABC):
    """
    Abstract driver for a messaging platform.

    Drivers push inbound messages to the registered callback and expose
    ``send_message`` for replies.
    """

    def __init__(self, name: str, config: Dict[str, Any]):
        self.name = name
        self.config = config
        self._callback: Optional[MessageCallback] = None

    def set_callback(self, callback: MessageCallback) -> None:
        self._callback = callback

    async def _invoke_callback(self, message: InboundMessage) -> None:
        if not self._callback:
            logger.warning(f"{self.name}: no callback registered, dropping {message.id}")
            return
        await self._callback(message)

    @abstractmethod
    async def connect(self) -> None:
        """Open connections or clients needed by the driver."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Release driver resources."""

    @abstractmethod
    async def send_message(self, target_id: str, content: str, **kwargs) -> bool:
        """Send a text message. Returns False on failure instead of raising."""
