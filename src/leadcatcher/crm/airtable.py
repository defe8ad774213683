"""
Airtable lead persistence.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from leadcatcher.errors import LeadSaveError, MediaProcessingError
from leadcatcher.logger import get_logger
from leadcatcher.media.ingest import MediaIngestor
from leadcatcher.messages import SMS_TEMPLATES
from leadcatcher.notifications import OperatorNotifier
from leadcatcher.session.models import MediaReference

logger = get_logger(__name__)


@dataclass
class LeadSaveResult:
    success: bool
    record_id: Optional[str] = None
    error: Optional[str] = None
    attachments: int = 0
    media_failed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        if self.success:
            data["message"] = "Lead saved successfully"
            data["record_id"] = self.record_id
            data["attachments"] = self.attachments
        else:
            data["error"] = self.error
        if self.media_failed:
            data["media_failed"] = True
        return data


class AirtableLeadStore:
    """Writes lead records (with uploaded media attachments) to an Airtable table."""

    def __init__(
        self,
        api_key: Optional[str],
        base_id: Optional[str],
        table_id: Optional[str],
        media: Optional[MediaIngestor] = None,
        notifier: Optional[OperatorNotifier] = None,
        base_url: str = "https://api.airtable.com/v0",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_id = base_id
        self.table_id = table_id
        self.base_url = base_url
        self.media = media
        self.notifier = notifier
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self._client

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/{self.base_id}/{self.table_id}"

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _notify(self, message: str, phone: str) -> None:
        if self.notifier:
            await self.notifier.notify(message, phone)

    async def save_lead(
        self, fields: Dict[str, Any], media: Optional[List[MediaReference]] = None
    ) -> LeadSaveResult:
        """
        Persist a lead. Never raises; failures come back in the result.

        Args:
            fields: Accumulated lead fields (name and phone are required).
            media: Pending media references to attach.
        """
        name = fields.get("name")
        phone = fields.get("phone")
        if not name or not phone:
            logger.error("Missing required fields for Airtable lead")
            await self._notify(f"{SMS_TEMPLATES['error']} Missing required fields: name or phone", phone or "")
            return LeadSaveResult(success=False, error="Lead Name and Phone are required fields.")

        logger.info(f"Saving lead to Airtable: {name} ({phone})")

        urls: List[str] = []
        media_failed = False
        if media and self.media:
            try:
                urls = await self.media.transfer(media)
                if len(urls) < len(media):
                    await self._notify(f"{SMS_TEMPLATES['apiFailure']}: Media upload failed for lead {name}", phone)
            except MediaProcessingError as e:
                media_failed = True
                logger.error(f"Media processing failed for lead {name}: {e}")
                await self._notify(f"{SMS_TEMPLATES['mediaError']}: {e}", phone)

        record_fields = {
            "Name": name,
            "Phone": phone,
            "Email": fields.get("email", ""),
            "Country": fields.get("country", ""),
            "Interest": fields.get("interest", ""),
            "Notes": fields.get("notes", ""),
            "Date Created": date.today().isoformat(),
        }
        if urls:
            record_fields["Attachments"] = [{"url": url} for url in urls]

        try:
            record_id = await self._create_record(record_fields)
        except LeadSaveError as e:
            logger.error(f"Error saving lead to Airtable: {e}")
            await self._notify(f"Airtable error for lead {name}: {e}", phone)
            return LeadSaveResult(success=False, error=str(e), media_failed=media_failed)

        logger.info(f"Lead saved successfully with ID: {record_id}")
        await self._notify(f"{SMS_TEMPLATES['success']} for {name} ({phone})", phone)
        return LeadSaveResult(
            success=True,
            record_id=record_id,
            attachments=len(urls),
            media_failed=media_failed,
        )

    async def _create_record(self, record_fields: Dict[str, Any]) -> str:
        try:
            response = await self.client.post(
                self.table_url,
                json={"records": [{"fields": record_fields}]},
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
            response.raise_for_status()
            return response.json()["records"][0]["id"]
        except httpx.HTTPStatusError as e:
            raise LeadSaveError(f"{e.response.status_code}: {e.response.text}") from e
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
            raise LeadSaveError(str(e)) from e
