"""
Vault error taxonomy.

Expected failures (bad input, unknown ids, conflicting grants, non-owner
actions) are raised as VaultError subclasses. Each carries a stable `code`
and a user-facing `message` so callers can explain exactly what went wrong.
Infrastructure failures (database, blob store) are not wrapped and propagate
as-is.
"""
from rest_framework import status
from rest_framework.response import Response


class VaultError(Exception):
    code = 'error'
    message = 'Something went wrong.'
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message=None, **context):
        self.message = message or self.message
        self.context = context
        super().__init__(self.message)


# ==================== TAXONOMY ====================

class InvalidInput(VaultError):
    code = 'invalid_input'
    message = 'The request is invalid.'
    http_status = status.HTTP_400_BAD_REQUEST


class NotFound(VaultError):
    code = 'not_found'
    message = 'Not found.'
    http_status = status.HTTP_404_NOT_FOUND


class Conflict(VaultError):
    code = 'conflict'
    message = 'The request conflicts with existing data.'
    http_status = status.HTTP_409_CONFLICT


class Unauthorized(VaultError):
    code = 'unauthorized'
    message = 'You are not allowed to do that.'
    http_status = status.HTTP_403_FORBIDDEN


class RateLimited(VaultError):
    code = 'rate_limited'
    message = 'Too many attempts. Try again later.'
    http_status = status.HTTP_429_TOO_MANY_REQUESTS


# ==================== INVALID INPUT ====================

class InvalidFileType(InvalidInput):
    code = 'invalid_type'
    message = 'Please upload a PDF, image, or Word document.'


class FileTooLarge(InvalidInput):
    code = 'too_large'
    message = 'Maximum file size is 5MB.'


class EmptyFile(InvalidInput):
    code = 'empty_file'
    message = 'The uploaded file is empty.'


class MalformedInviteCode(InvalidInput):
    code = 'malformed_code'
    message = 'Invite codes are made of letters and digits only.'


class InvalidPhoneNumber(InvalidInput):
    code = 'invalid_phone'
    message = 'Enter a valid mobile number (10 to 15 digits).'


class InvalidDocumentUpdate(InvalidInput):
    code = 'invalid_update'
    message = 'No editable document fields were provided.'


class InvalidOTP(InvalidInput):
    code = 'invalid_otp'
    message = 'Invalid or expired OTP.'


# ==================== NOT FOUND ====================

class InviteCodeNotFound(NotFound):
    code = 'code_not_found'
    message = 'No active invite code matches.'


class InvalidInviteCode(NotFound):
    code = 'invalid_code'
    message = 'This invite code does not exist.'


class DocumentNotFound(NotFound):
    code = 'document_not_found'
    message = 'Document not found.'


class UserNotFound(NotFound):
    code = 'user_not_found'
    message = 'User not found.'


# ==================== CONFLICT ====================

class SelfGrant(Conflict):
    code = 'self_grant'
    message = 'An owner cannot grant access to themselves.'


class GrantAlreadyExists(Conflict):
    code = 'grant_exists'
    message = 'Access has already been granted.'


class SelfRedeem(Conflict):
    code = 'self_redeem'
    message = 'You cannot use your own invite code.'


class AlreadyConnected(Conflict):
    code = 'already_connected'
    message = 'You already have access to these documents.'


# ==================== UNAUTHORIZED ====================

class NotDocumentOwner(Unauthorized):
    code = 'not_owner'
    message = 'Only the owner can change this document.'


class AccountNotVerified(Unauthorized):
    code = 'not_verified'
    message = 'Verify your mobile number first.'


def error_response(exc):
    """Render a VaultError as the API's error payload."""
    return Response({"error": exc.message, "code": exc.code}, status=exc.http_status)
