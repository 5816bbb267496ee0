from rest_framework.permissions import BasePermission

from apps.common.errors import AccountNotVerified


class IsVerifiedUser(BasePermission):
    """Only allows access to active users who have verified their mobile number."""
    message = AccountNotVerified.message

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_active and user.is_phone_verified
