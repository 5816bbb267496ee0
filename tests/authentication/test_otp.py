from __future__ import annotations

import pytest
from django.core.cache import cache

from apps.authentication.identity import (
    UNKNOWN_USER_NAME,
    AuthenticatedIdentity,
    OTPAuthenticator,
    UserDirectory,
)
from apps.authentication.models import User
from apps.common.errors import InvalidOTP, RateLimited, UserNotFound

REGISTER_URL = "/api/auth/register/"
REQUEST_OTP_URL = "/api/auth/request-otp/"
VERIFY_OTP_URL = "/api/auth/verify-otp/"
ME_URL = "/api/auth/me/"

# Generated codes are 100000-999999
WRONG_OTP = "000000"


def cached_otp(user):
    return cache.get(f"otp_{user.id}")


# -----------------------------
# Authenticator
# -----------------------------
def test_verify_marks_phone_verified(make_user):
    user = make_user(verified=False)
    authenticator = OTPAuthenticator()
    authenticator.request_code(user.mobile)

    identity = authenticator.verify(user.mobile, cached_otp(user))

    assert identity == AuthenticatedIdentity(user_id=user.id, is_verified=True)
    user.refresh_from_db()
    assert user.is_phone_verified
    assert cached_otp(user) is None


def test_wrong_code_is_rejected(make_user):
    user = make_user(verified=False)
    authenticator = OTPAuthenticator()
    authenticator.request_code(user.mobile)

    with pytest.raises(InvalidOTP):
        authenticator.verify(user.mobile, WRONG_OTP)
    user.refresh_from_db()
    assert not user.is_phone_verified


def test_verify_attempts_are_limited(make_user, settings):
    settings.OTP_MAX_ATTEMPTS = 2
    user = make_user()
    authenticator = OTPAuthenticator()
    authenticator.request_code(user.mobile)
    code = cached_otp(user)
    wrong = WRONG_OTP

    for _ in range(2):
        with pytest.raises(InvalidOTP):
            authenticator.verify(user.mobile, wrong)
    with pytest.raises(RateLimited):
        authenticator.verify(user.mobile, code)


def test_resend_cooldown(make_user):
    user = make_user()
    authenticator = OTPAuthenticator()
    authenticator.request_code(user.mobile)

    with pytest.raises(RateLimited):
        authenticator.request_code(user.mobile)


def test_unknown_mobile(db):
    with pytest.raises(UserNotFound):
        OTPAuthenticator().request_code("+919999999999")


# -----------------------------
# Directory
# -----------------------------
def test_directory_profiles(make_user):
    user = make_user("Alice", "Owner", email="alice@example.com")
    directory = UserDirectory()

    profile = directory.get_user_by_id(user.id)

    assert profile.display_name == "Alice Owner"
    assert profile.email == "alice@example.com"
    assert directory.get_profiles([user.id, 424242]).keys() == {user.id}


def test_directory_unknown_user(db):
    directory = UserDirectory()
    with pytest.raises(UserNotFound):
        directory.get_user_by_id(424242)
    assert directory.display_name(424242) == UNKNOWN_USER_NAME


def test_display_name_falls_back_to_mobile(make_user):
    user = make_user("", "", mobile="+919812345678")
    assert UserDirectory().display_name(user.id) == "+919812345678"


# -----------------------------
# Endpoints
# -----------------------------
def test_register_then_login(api_client, db):
    response = api_client.post(
        REGISTER_URL,
        {"mobile": "+91 98765-43210", "first_name": "Priya", "last_name": "Shah"},
        format="json",
    )
    assert response.status_code == 201
    user = User.objects.get(mobile="+919876543210")
    assert not user.is_phone_verified

    response = api_client.post(VERIFY_OTP_URL, {"mobile": user.mobile, "otp": cached_otp(user)}, format="json")

    assert response.status_code == 200
    assert response.data["user"]["is_phone_verified"] is True
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
    assert api_client.get(ME_URL).data["display_name"] == "Priya Shah"


def test_register_rejects_bad_and_duplicate_mobiles(api_client, make_user):
    make_user(mobile="+919876543210")

    bad = api_client.post(REGISTER_URL, {"mobile": "12ab", "first_name": "X"}, format="json")
    duplicate = api_client.post(REGISTER_URL, {"mobile": "+919876543210", "first_name": "X"}, format="json")

    assert bad.status_code == 400 and "mobile" in bad.data
    assert duplicate.status_code == 400 and "mobile" in duplicate.data


def test_verify_endpoint_rejects_wrong_code(api_client, make_user):
    user = make_user(verified=False)
    api_client.post(REQUEST_OTP_URL, {"mobile": user.mobile}, format="json")
    wrong = WRONG_OTP

    response = api_client.post(VERIFY_OTP_URL, {"mobile": user.mobile, "otp": wrong}, format="json")

    assert response.status_code == 400
    assert response.data["code"] == "invalid_otp"


def test_request_otp_twice_is_throttled(api_client, make_user):
    user = make_user()

    first = api_client.post(REQUEST_OTP_URL, {"mobile": user.mobile}, format="json")
    second = api_client.post(REQUEST_OTP_URL, {"mobile": user.mobile}, format="json")

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.data["code"] == "rate_limited"
