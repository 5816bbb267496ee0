"""
Cache-backed throttles shared by OTP delivery, OTP verification and invite
redemption.

Two shapes:
- a send cooldown (one send per `limit_seconds` per recipient)
- a failed-attempt window (`max_attempts` failures per `window_minutes`)
"""
from django.core.cache import cache
from django.utils import timezone


def _cooldown_key(identifier, action):
    return f"send_cooldown:{action}:{str(identifier).lower()}"


def _attempts_key(identifier, action):
    return f"code_attempts:{action}:{str(identifier).lower()}"


def _load_window(identifier, action, window_minutes):
    """
    Current attempt window as (count, seconds_elapsed). An expired or
    missing window reads as empty.
    """
    data = cache.get(_attempts_key(identifier, action))
    if not data:
        return 0, 0, timezone.now()

    elapsed = (timezone.now() - data['first_attempt']).total_seconds()
    if elapsed > window_minutes * 60:
        return 0, 0, timezone.now()
    return data['count'], elapsed, data['first_attempt']


def check_send_cooldown(identifier, action='otp', limit_seconds=30):
    """
    Claim a send slot for `identifier`.

    Returns:
        tuple: (is_allowed, wait_time) with wait_time in seconds
    """
    key = _cooldown_key(identifier, action)
    last_sent = cache.get(key)

    if last_sent:
        elapsed = (timezone.now() - last_sent).total_seconds()
        if elapsed < limit_seconds:
            return False, int(limit_seconds - elapsed)

    cache.set(key, timezone.now(), timeout=limit_seconds)
    return True, 0


def check_code_attempt_limit(identifier, action='verification', max_attempts=5, window_minutes=10):
    """
    Returns:
        tuple: (is_allowed, attempts_remaining, reset_time) with reset_time in seconds
    """
    count, elapsed, _ = _load_window(identifier, action, window_minutes)
    if count >= max_attempts:
        return False, 0, int(window_minutes * 60 - elapsed)
    return True, max_attempts - count, 0


def increment_failed_attempts(identifier, action='verification', max_attempts=5, window_minutes=10):
    """Record one failure. Returns attempts remaining (0 once the limit is hit)."""
    count, _, first_attempt = _load_window(identifier, action, window_minutes)
    count += 1
    cache.set(
        _attempts_key(identifier, action),
        {'count': count, 'first_attempt': first_attempt},
        timeout=window_minutes * 60,
    )
    return max(0, max_attempts - count)


def clear_failed_attempts(identifier, action='verification'):
    cache.delete(_attempts_key(identifier, action))
