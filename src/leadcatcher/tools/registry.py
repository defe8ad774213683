"""
Tool registry: exposes tool schemas to the model and runs invocations.
"""

import json
from typing import Any, Dict, List, Optional

from leadcatcher.llm import ToolInvocation
from leadcatcher.logger import get_logger
from leadcatcher.session.models import Session
from leadcatcher.tools.base import SessionTool, ToolOutcome

logger = get_logger(__name__)


class ToolRegistry:
    def __init__(self, tools: Optional[List[SessionTool]] = None):
        self._tools: Dict[str, SessionTool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: SessionTool) -> None:
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[SessionTool]:
        return self._tools.get(name)

    def schemas(self) -> List[Dict[str, Any]]:
        return [tool.schema() for tool in self._tools.values()]

    async def execute(self, session: Session, call: ToolInvocation) -> ToolOutcome:
        """
        Run the tool named by ``call``.

        Never raises: unknown tools, malformed arguments and tool errors all
        become failure outcomes so the caller can always record a result.
        """
        tool = self._tools.get(call.name)
        if tool is None:
            logger.warning(f"Model requested unknown tool {call.name}")
            return ToolOutcome(
                success=False,
                payload={"success": False, "error": f"Unknown tool: {call.name}"},
                fallback=("errors", "general"),
            )

        try:
            arguments = json.loads(call.arguments or "{}")
            if not isinstance(arguments, dict):
                raise ValueError("Tool arguments must be a JSON object")
            return await tool.run(session, arguments)
        except Exception as e:
            logger.error(f"Tool {call.name} failed for {session.id}: {e}")
            return ToolOutcome(
                success=False,
                payload={"success": False, "error": str(e)},
                fallback=tool.failure_fallback,
                notify_operator=True,
            )
