"""
Operator notifications over SMS through the Twilio client.

Notifications are best effort: failures are logged and never raised to the
conversation path.
"""

import asyncio
from typing import Any, Dict, List, Optional

from twilio.rest import Client

from leadcatcher.logger import get_logger

logger = get_logger(__name__)


class OperatorNotifier:
    """Sends short alerts to every configured operator number."""

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        numbers: List[str],
        client: Optional[Client] = None,
        delay_seconds: float = 2.0,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.numbers = list(numbers)
        self.delay_seconds = delay_seconds
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number and self.numbers)

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    async def notify(self, message: str, lead_phone: str) -> Dict[str, Any]:
        """
        Send ``message`` to all operator numbers.

        Returns:
            {"success": bool, "results": [...]}; never raises.
        """
        if not self.enabled:
            logger.debug(f"Operator notification skipped (not configured): {message}")
            return {"success": False, "results": [], "error": "not configured"}

        body = f"{message}, Lead phone number: {lead_phone}"
        results = []
        has_error = False

        for index, to in enumerate(self.numbers):
            try:
                sent = await asyncio.to_thread(
                    self.client.messages.create, body=body, from_=self.from_number, to=to
                )
                logger.info(f"SMS successfully sent to {to} (SID: {sent.sid})")
                results.append({"to": to, "success": True, "sid": sent.sid})
            except Exception as e:
                has_error = True
                logger.error(f"Failed to send SMS to {to}: {e}")
                results.append({"to": to, "success": False, "error": str(e)})

            # Space out messages to stay under rate limits
            if index < len(self.numbers) - 1 and self.delay_seconds:
                await asyncio.sleep(self.delay_seconds)

        return {"success": not has_error, "results": results}
