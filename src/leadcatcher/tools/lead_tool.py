"""
Lead capture tool: merges collected profile fields and saves them to the CRM.
"""

from typing import Any, Dict

from leadcatcher.crm.airtable import AirtableLeadStore
from leadcatcher.logger import get_logger
from leadcatcher.messages import SMS_TEMPLATES
from leadcatcher.session.models import Session
from leadcatcher.tools.base import SessionTool, ToolOutcome

logger = get_logger(__name__)

LEAD_FIELDS = ("name", "phone", "email", "country", "interest", "notes")


class SaveLeadTool(SessionTool):
    name = "saveLeadToAirtable"
    description = "Saves a lead to the Airtable CRM tool using the API."
    parameters = {
        "type": "object",
        "properties": {
            "name": {
                "type": "string",
                "description": "The full name of the potential client or lead",
            },
            "phone": {
                "type": "string",
                "description": "The phone number of the lead",
            },
            "email": {
                "type": "string",
                "description": "Email address of the lead (optional)",
            },
            "country": {
                "type": "string",
                "description": "The country where the lead resides",
            },
            "interest": {
                "type": "string",
                "description": "Service or product the lead is interested in (optional)",
            },
            "notes": {
                "type": "string",
                "description": "Additional notes or comments from the conversation",
            },
        },
        "required": ["name", "phone"],
    }
    failure_fallback = ("errors", "savingLead")

    def __init__(self, lead_store: AirtableLeadStore):
        self.lead_store = lead_store

    def failure_alert(self) -> str:
        return SMS_TEMPLATES["error"]

    async def run(self, session: Session, arguments: Dict[str, Any]) -> ToolOutcome:
        updates = {key: arguments[key] for key in LEAD_FIELDS if arguments.get(key)}
        updates.setdefault("phone", session.id)

        with session.lock:
            session.lead_fields.update(updates)
            lead = dict(session.lead_fields)
            media = list(session.pending_media)

        logger.info(f"Found {len(media)} media files for {session.id}")
        result = await self.lead_store.save_lead(lead, media)

        if result.success and not result.media_failed:
            with session.lock:
                # Keep anything that arrived while the save was running.
                session.pending_media = session.pending_media[len(media):]
            logger.info(f"Cleared media files for session {session.id}")

        if not result.success:
            fallback = self.failure_fallback
        elif result.media_failed:
            fallback = ("errors", "mediaProcessing")
        else:
            fallback = ("success", "leadSaved")

        logger.info(f"Lead save result for {session.id}: {result.to_dict()}")
        return ToolOutcome(success=result.success, payload=result.to_dict(), fallback=fallback)
