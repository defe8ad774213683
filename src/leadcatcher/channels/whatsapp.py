"""
WhatsApp Cloud API Channel Driver.

Inbound messages arrive through the webhook routes; this driver parses the
payload shape, sends replies, and downloads media on request.
"""

from typing import Any, Dict, Optional

import httpx

from leadcatcher.channels.base import InboundMessage, MessagingChannel
from leadcatcher.errors import ChannelError
from leadcatcher.logger import get_logger

logger = get_logger(__name__)

MEDIA_TYPES = ("image", "video", "document", "audio")


class WhatsAppChannel(MessagingChannel):
    """
    WhatsApp Business Cloud API driver using httpx.
    """

    def __init__(self, config: Dict[str, Any], client: Optional[httpx.AsyncClient] = None):
        super().__init__("whatsapp", config)
        self.verify_token = config.get("verify_token")
        self.access_token = config.get("access_token")
        self.phone_number_id = config.get("phone_number_id")
        self.api_version = config.get("api_version", "v17.0")
        self.base_url = config.get("base_url", "https://graph.facebook.com")
        self._client = client

        if not self.access_token or not self.phone_number_id:
            logger.warning("WhatsApp credentials missing. Outbound messages will fail.")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self._client

    @property
    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/{self.api_version}/{self.phone_number_id}/messages"

    async def connect(self):
        """Create the HTTP client."""
        _ = self.client
        logger.info("WhatsApp channel ready.")

    async def disconnect(self):
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("WhatsApp channel closed.")

    # -- Webhook ------------------------------------------------------------

    def verify_webhook(self, mode: Optional[str], token: Optional[str], challenge: Optional[str]) -> Optional[str]:
        """Return the challenge if the subscription request is valid, else None."""
        if mode == "subscribe" and token and token == self.verify_token:
            logger.info("WhatsApp webhook verified")
            return challenge or ""
        logger.warning("WhatsApp webhook verification failed")
        return None

    @staticmethod
    def parse_webhook(body: Dict[str, Any]) -> Optional[InboundMessage]:
        """
        Extract the first message from a webhook payload.

        Returns None for status callbacks and anything that is not a
        business-account message.
        """
        if not isinstance(body, dict) or body.get("object") != "whatsapp_business_account":
            return None

        try:
            value = body["entry"][0]["changes"][0]["value"]
        except (KeyError, IndexError, TypeError):
            return None

        if value.get("statuses"):
            status = value["statuses"][0]
            logger.info(
                f'Status update: "{status.get("status")}" for message to {status.get("recipient_id")}'
            )
            return None

        messages = value.get("messages") or []
        contacts = value.get("contacts") or []
        if not messages or not contacts:
            return None

        data = messages[0]
        contact = contacts[0]
        msg_type = data.get("type", "text")

        timestamp = data.get("timestamp")
        message = InboundMessage(
            id=data.get("id", ""),
            sender_id=data.get("from", ""),
            sender_name=(contact.get("profile") or {}).get("name"),
            platform="whatsapp",
            type=msg_type,
            timestamp=float(timestamp) if timestamp else None,
            raw_data=data,
        )

        if msg_type == "text":
            message.text = (data.get("text") or {}).get("body", "")
        elif msg_type in MEDIA_TYPES:
            media = data.get(msg_type) or {}
            message.media_id = media.get("id")
            message.mime_type = media.get("mime_type")

        return message

    async def handle_webhook(self, body: Dict[str, Any]) -> bool:
        """Parse a webhook payload and forward any message to the callback."""
        message = self.parse_webhook(body)
        if not message:
            logger.info("No valid WhatsApp message found in webhook")
            return False

        logger.info(
            f"New {message.type} message from {message.sender_name} ({message.sender_id})"
        )
        await self._invoke_callback(message)
        return True

    # -- Outbound -----------------------------------------------------------

    async def send_message(self, target_id: str, content: str, **kwargs) -> bool:
        payload = {
            "messaging_product": "whatsapp",
            "to": target_id,
            "text": {"body": content},
        }
        try:
            response = await self.client.post(
                self.messages_url, json=payload, headers=self._auth_headers
            )
            response.raise_for_status()
            logger.info(f"Message sent to {target_id}")
            return True
        except httpx.HTTPStatusError as e:
            logger.error(f"WhatsApp API error: {e.response.status_code} {e.response.text}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Error sending WhatsApp message: {e}")
            return False

    async def download_media(self, media_id: str) -> bytes:
        """
        Fetch media bytes in two steps: resolve the media URL, then download it.

        Raises:
            ChannelError: If either request fails.
        """
        try:
            meta = await self.client.get(
                f"{self.base_url}/{self.api_version}/{media_id}",
                headers=self._auth_headers,
            )
            meta.raise_for_status()
            media_url = meta.json()["url"]

            media = await self.client.get(media_url, headers=self._auth_headers)
            media.raise_for_status()
            return media.content
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error(f"Error downloading WhatsApp media {media_id}: {e}")
            raise ChannelError(f"Failed to download media {media_id}: {e}") from e
