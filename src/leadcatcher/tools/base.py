"""
Base class for tools the completion model can invoke.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from leadcatcher.messages import SMS_TEMPLATES
from leadcatcher.session.models import Session

MessageKey = Tuple[str, str]


@dataclass
class ToolOutcome:
    """
    Result of running one tool.

    ``payload`` becomes the tool-result turn content. ``fallback`` names the
    localized message used when the model produced no text of its own.
    """

    success: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    resubmit: bool = False
    fallback: Optional[MessageKey] = None
    notify_operator: bool = False


class SessionTool(ABC):
    name: str = ""
    description: str = ""
    parameters: Dict[str, Any] = {"type": "object", "properties": {}}
    failure_fallback: MessageKey = ("errors", "general")

    def schema(self) -> Dict[str, Any]:
        """OpenAI function-tool schema for this tool."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def failure_alert(self) -> str:
        """Heading of the operator SMS sent when this tool fails."""
        return SMS_TEMPLATES["systemError"].format(errorDetails=self.name)

    @abstractmethod
    async def run(self, session: Session, arguments: Dict[str, Any]) -> ToolOutcome:
        """Execute the tool. Raise ValueError for invalid arguments."""
