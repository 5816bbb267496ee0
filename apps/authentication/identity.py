"""
Identity provider seam.

The vault trusts a stable user id plus a verification flag and looks up
display profiles by id. Authentication itself is a phone + one-time-code
flow; JWT issuance stays in the views.
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from apps.common.errors import InvalidOTP, RateLimited, UserNotFound
from apps.common.validators import normalize_mobile

from .models import User
from .rate_limiting import (
    check_send_cooldown, check_code_attempt_limit,
    increment_failed_attempts, clear_failed_attempts,
)
from .utils import generate_otp, send_auth_otp

logger = logging.getLogger(__name__)

UNKNOWN_USER_NAME = 'Unknown user'


@dataclass(frozen=True)
class Profile:
    id: int
    display_name: str
    email: Optional[str]
    mobile: str
    is_verified: bool

    @classmethod
    def from_user(cls, user):
        return cls(
            id=user.id,
            display_name=user.display_name,
            email=user.email,
            mobile=user.mobile,
            is_verified=user.is_phone_verified,
        )


@dataclass(frozen=True)
class AuthenticatedIdentity:
    user_id: int
    is_verified: bool


class UserDirectory:
    """Profile lookup by user id."""

    def get_user_by_id(self, user_id):
        try:
            return Profile.from_user(User.objects.get(pk=user_id))
        except (User.DoesNotExist, ValueError, TypeError):
            raise UserNotFound(user_id=user_id)

    def get_profiles(self, user_ids):
        """Bulk lookup; ids with no account are simply absent from the result."""
        users = User.objects.filter(pk__in=list(user_ids))
        return {user.id: Profile.from_user(user) for user in users}

    def display_name(self, user_id, profiles=None):
        if profiles is not None:
            profile = profiles.get(user_id)
            return profile.display_name if profile else UNKNOWN_USER_NAME
        try:
            return self.get_user_by_id(user_id).display_name
        except UserNotFound:
            return UNKNOWN_USER_NAME


class OTPAuthenticator:
    """Phone + one-time code authentication."""

    action = 'otp'

    def _cache_key(self, user):
        return f"otp_{user.id}"

    def _get_user(self, mobile):
        mobile = normalize_mobile(mobile)
        user = User.objects.filter(mobile=mobile).first()
        if not user:
            logger.warning("OTP requested for unknown mobile %s", mobile)
            raise UserNotFound(message="User not found. Please register.")
        return user

    def request_code(self, mobile):
        user = self._get_user(mobile)

        is_allowed, wait_time = check_send_cooldown(
            user.mobile, action=self.action, limit_seconds=settings.OTP_RESEND_COOLDOWN,
        )
        if not is_allowed:
            raise RateLimited(message=f"OTP sent recently. Try again in {wait_time} seconds.")

        otp = generate_otp()
        cache.set(self._cache_key(user), otp, timeout=settings.OTP_EXPIRY)
        send_auth_otp(user.mobile, otp)

        user.last_otp_sent_at = timezone.now()
        user.save(update_fields=['last_otp_sent_at'])
        logger.info("OTP issued for user_id=%s", user.id)
        return user

    def verify(self, mobile, code):
        user = self._get_user(mobile)

        is_allowed, _, reset_time = check_code_attempt_limit(
            user.mobile, action=self.action, max_attempts=settings.OTP_MAX_ATTEMPTS,
        )
        if not is_allowed:
            raise RateLimited(message=f"Too many attempts. Try again in {reset_time} seconds.")

        cached_otp = cache.get(self._cache_key(user))
        if not cached_otp or not secrets.compare_digest(str(cached_otp), str(code or '')):
            remaining = increment_failed_attempts(
                user.mobile, action=self.action, max_attempts=settings.OTP_MAX_ATTEMPTS,
            )
            logger.warning("OTP verify failed for user_id=%s (%s attempts left)", user.id, remaining)
            raise InvalidOTP()

        cache.delete(self._cache_key(user))
        clear_failed_attempts(user.mobile, action=self.action)

        if not user.is_phone_verified:
            user.is_phone_verified = True
            user.save(update_fields=['is_phone_verified'])

        logger.info("OTP verified for user_id=%s", user.id)
        return AuthenticatedIdentity(user_id=user.id, is_verified=user.is_phone_verified)
