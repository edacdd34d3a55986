"""
Notification Service Abstract Base Class

Defines the interface for sending SMS to the hotel operator.
Supports both Mock (development) and Twilio (production) implementations.

Delivery is best-effort: `notify_operator` logs failures and returns
False, it never raises.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    """Result from sending a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


class BaseNotificationService(ABC):
    """Abstract base class for notification services."""

    def __init__(self, operator_phone: Optional[str] = None):
        self.operator_phone = operator_phone

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def send_sms(
        self,
        to_phone: str,
        message: str,
    ) -> NotificationResult:
        """Send an SMS message."""
        pass

    async def notify_operator(self, body: str) -> bool:
        """
        Send `body` to the operator number. Fire-and-forget.

        Returns:
            True if the gateway accepted the message
        """
        if not self.operator_phone:
            logger.error("Operator phone number not configured; SMS not sent")
            return False

        try:
            result = await self.send_sms(self.operator_phone, body)
        except Exception as e:
            logger.exception(f"Error sending SMS via {self.provider_name}: {e}")
            return False

        if result.success:
            logger.info(f"SMS sent successfully ({result.message_id})")
        else:
            logger.error(f"Error sending SMS via {result.provider}: {result.error_message}")
        return result.success
