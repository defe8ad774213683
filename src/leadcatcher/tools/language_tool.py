"""
Locale tool: records the conversant's language preference on the session.
"""

from typing import Any, Dict, List

from leadcatcher.logger import get_logger
from leadcatcher.session.models import Session
from leadcatcher.tools.base import SessionTool, ToolOutcome

logger = get_logger(__name__)


class SetUserLanguageTool(SessionTool):
    name = "setUserLanguage"
    description = "Sets the user's language preference based on their selection"

    def __init__(self, supported_languages: List[str]):
        self.supported_languages = list(supported_languages)
        self.parameters = {
            "type": "object",
            "properties": {
                "language": {
                    "type": "string",
                    "enum": self.supported_languages,
                    "description": "The language code selected by the user (en for English, de for German)",
                }
            },
            "required": ["language"],
        }

    async def run(self, session: Session, arguments: Dict[str, Any]) -> ToolOutcome:
        language = arguments.get("language")
        if language not in self.supported_languages:
            raise ValueError(f"Unsupported language: {language!r}")

        with session.lock:
            session.language = language
        logger.info(f"Language preference set to {language} for {session.id}")

        # Session-local change: run the turn again so the reply uses it.
        return ToolOutcome(
            success=True,
            payload={"success": True, "language": language},
            resubmit=True,
            fallback=("success", "languageSet"),
        )
