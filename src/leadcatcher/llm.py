"""
LiteLLM integration for chat completions with tool calling.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import litellm

from leadcatcher.errors import CompletionError
from leadcatcher.logger import get_logger

logger = get_logger(__name__)

# Drop unsupported parameters when calling APIs
litellm.drop_params = True


@dataclass
class ToolInvocation:
    """A single tool call requested by the model."""

    id: str
    name: str
    arguments: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class CompletionResult:
    """Either a final text answer or a request to invoke tools."""

    content: Optional[str] = None
    tool_calls: List[ToolInvocation] = field(default_factory=list)
    finish_reason: Optional[str] = None

    @property
    def wants_tool(self) -> bool:
        return bool(self.tool_calls)


class CompletionClient:
    """Chat-completion client used for every conversation turn."""

    def __init__(self, model: str, temperature: float = 0.3):
        """
        Args:
            model: LiteLLM model identifier (e.g. 'openai/gpt-4o-mini')
            temperature: Sampling temperature
        """
        self.model = model
        self.temperature = temperature

    async def complete(
        self,
        turns: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> CompletionResult:
        """
        Send the transcript and return the model's answer.

        Raises:
            CompletionError: If the request fails or the response has no choices.
        """
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": turns,
            "temperature": self.temperature,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            logger.error(f"LLM completion failed: {e}")
            raise CompletionError(str(e)) from e

        if not response.choices:
            raise CompletionError("Completion response contained no choices")

        return self._parse_choice(response.choices[0])

    @staticmethod
    def _parse_choice(choice: Any) -> CompletionResult:
        message = choice.message
        finish_reason = choice.finish_reason

        tool_calls = []
        if finish_reason == "tool_calls" and getattr(message, "tool_calls", None):
            for call in message.tool_calls:
                tool_calls.append(
                    ToolInvocation(
                        id=call.id,
                        name=call.function.name,
                        arguments=call.function.arguments or "{}",
                    )
                )

        return CompletionResult(
            content=message.content,
            tool_calls=tool_calls,
            finish_reason=finish_reason,
        )
