"""Fire-and-forget user notifications. Delivery never affects the caller."""
import logging

from .msg91_service import MSG91Service

logger = logging.getLogger(__name__)


class SMSNotifier:
    def notify(self, user, message):
        mobile = getattr(user, 'mobile', None)
        try:
            delivered = MSG91Service.send_sms(mobile, message)
        except Exception:
            logger.exception("Notification to user_id=%s failed", getattr(user, 'id', None))
            return False
        if not delivered:
            logger.info("Notification to user_id=%s not delivered", getattr(user, 'id', None))
        return delivered
