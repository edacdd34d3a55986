"""
Notification Service Factory

Returns Mock or Twilio notification service based on ENV_MODE.
"""

import logging
from functools import lru_cache

from hotel_orders.core.config import get_settings
from hotel_orders.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)
from hotel_orders.services.notifications.mock import MockNotificationService
from hotel_orders.services.notifications.twilio_sms import TwilioNotificationService

logger = logging.getLogger(__name__)


@lru_cache()
def get_notification_service() -> BaseNotificationService:
    """Get the configured notification service."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Notification Service: Using MockNotificationService (development mode)")
        return MockNotificationService(
            operator_phone=settings.admin_phone_number or "+910000000000",
            failure_rate=0.05,
        )
    else:
        logger.info(f"Notification Service: Using TwilioNotificationService ({settings.env_mode.value} mode)")
        return TwilioNotificationService(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.twilio_phone_number,
            operator_phone=settings.admin_phone_number,
        )


def reset_notification_service() -> None:
    """Clear the cached service instance."""
    get_notification_service.cache_clear()


__all__ = [
    "get_notification_service",
    "reset_notification_service",
    "BaseNotificationService",
    "NotificationResult",
    "MockNotificationService",
    "TwilioNotificationService",
]
