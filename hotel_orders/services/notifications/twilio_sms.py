"""
Twilio Notification Service

Production SMS delivery through the Twilio REST API. The sender number
and operator number come from settings; missing credentials are logged
at startup and every send then fails softly.
"""

import asyncio
import logging
from typing import Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client as TwilioClient

from hotel_orders.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)

logger = logging.getLogger(__name__)


class TwilioNotificationService(BaseNotificationService):
    """Production notification service using Twilio."""

    def __init__(
        self,
        account_sid: Optional[str],
        auth_token: Optional[str],
        from_number: Optional[str],
        operator_phone: Optional[str],
    ):
        super().__init__(operator_phone)

        if account_sid and auth_token:
            self.twilio_client = TwilioClient(account_sid, auth_token)
        else:
            self.twilio_client = None
            logger.warning("Twilio credentials not configured")

        self.twilio_from_number = from_number
        logger.info("TwilioNotificationService initialized")

    @property
    def provider_name(self) -> str:
        return "twilio"

    async def send_sms(
        self,
        to_phone: str,
        message: str,
    ) -> NotificationResult:
        """Send SMS via Twilio."""
        if not self.twilio_client or not self.twilio_from_number:
            return NotificationResult(
                success=False,
                error_message="Twilio not configured",
                provider="twilio"
            )

        try:
            # The Twilio client is blocking
            result = await asyncio.to_thread(
                self.twilio_client.messages.create,
                body=message,
                from_=self.twilio_from_number,
                to=to_phone,
            )

            logger.info(f"SMS sent to {to_phone}: {result.sid}")

            return NotificationResult(
                success=True,
                message_id=result.sid,
                provider="twilio"
            )

        except TwilioException as e:
            logger.error(f"Twilio error: {e}")
            return NotificationResult(
                success=False,
                error_message=str(e),
                provider="twilio"
            )
