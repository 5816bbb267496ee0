import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

OTP_URL = "https://api.msg91.com/api/v5/otp"
FLOW_URL = "https://api.msg91.com/api/v5/flow/"


class MSG91Service:
    """SMS delivery over the MSG91 HTTP API. Every call returns True/False, never raises."""

    @staticmethod
    def _with_country_code(mobile):
        # Bare 10-digit numbers are Indian
        mobile = mobile.lstrip('+')
        if len(mobile) == 10:
            mobile = "91" + mobile
        return mobile

    @staticmethod
    def _send(label, method, url, **kwargs):
        try:
            response = requests.request(method, url, timeout=settings.MSG91_TIMEOUT, **kwargs)
        except requests.RequestException as e:
            logger.error("MSG91 %s request failed: %s", label, e)
            return False

        if response.status_code != 200:
            logger.error("MSG91 %s error (%s): %s", label, response.status_code, response.text)
            return False
        return True

    @staticmethod
    def send_otp(mobile, otp):
        """Deliver a one-time code through the OTP template."""
        if not (settings.MSG91_API_KEY and settings.MSG91_TEMPLATE_ID):
            logger.error("MSG91 OTP credentials missing (key set: %s, template set: %s)",
                         bool(settings.MSG91_API_KEY), bool(settings.MSG91_TEMPLATE_ID))
            return False

        return MSG91Service._send("otp", "GET", OTP_URL, params={
            "authkey": settings.MSG91_API_KEY,
            "template_id": settings.MSG91_TEMPLATE_ID,
            "mobile": MSG91Service._with_country_code(mobile),
            "otp": otp,
            "otp_length": len(otp),
        })

    @staticmethod
    def send_sms(mobile, message):
        """
        Transactional SMS through the Flow API. Needs MSG91_NOTIFY_TEMPLATE_ID
        pointing at a pre-approved template with a `message` variable.
        """
        if not mobile:
            logger.warning("MSG91 send_sms: no mobile number provided")
            return False

        if not (settings.MSG91_API_KEY and settings.MSG91_NOTIFY_TEMPLATE_ID):
            logger.info("MSG91 SMS (template not configured): To=%s | %s", mobile, message)
            return False

        return MSG91Service._send("sms", "POST", FLOW_URL, headers={"authkey": settings.MSG91_API_KEY}, json={
            "template_id": settings.MSG91_NOTIFY_TEMPLATE_ID,
            "short_url": 0,
            "recipients": [{"mobiles": MSG91Service._with_country_code(mobile), "message": message}],
        })
