"""Tools the completion model can call during a turn."""

from .base import SessionTool, ToolOutcome
from .language_tool import SetUserLanguageTool
from .lead_tool import SaveLeadTool
from .registry import ToolRegistry

__all__ = [
    "SaveLeadTool",
    "SessionTool",
    "SetUserLanguageTool",
    "ToolOutcome",
    "ToolRegistry",
]
