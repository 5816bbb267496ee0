import logging
import secrets

from django.conf import settings

from apps.integrations.msg91_service import MSG91Service

logger = logging.getLogger(__name__)


def generate_otp():
    return f"{secrets.randbelow(900000) + 100000}"


def send_auth_otp(mobile, otp):
    # Send OTP on mobile only if OTP_DEBUG_FLAG is set to NO
    if settings.OTP_DEBUG_FLAG == "NO":
        success = MSG91Service.send_otp(mobile, otp)
        if success:
            return True
        logger.error("OTP delivery via MSG91 failed for %s", mobile)
        return False
    # Development fallback when SMS delivery is switched off
    logger.info("FALLBACK: OTP for %s is %s", mobile, otp)
    return True
