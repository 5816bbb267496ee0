"""
Validation rules shared by every entry point (API views, ingestion, auth).
Each function returns the normalized value or raises an InvalidInput error.
"""
import re

from django.conf import settings

from .errors import (
    InvalidFileType, FileTooLarge, EmptyFile, MalformedInviteCode, InvalidPhoneNumber,
)

PDF_CONTENT_TYPE = 'application/pdf'

_PHONE_RE = re.compile(r'^\+?\d{10,15}$')
_INVITE_CODE_RE = re.compile(r'^[A-Z0-9]+$')


def normalize_content_type(content_type):
    # Drop parameters such as "; charset=binary"
    return (content_type or '').split(';', 1)[0].strip().lower()


def validate_content_type(content_type):
    normalized = normalize_content_type(content_type)
    if normalized not in settings.ALLOWED_UPLOAD_CONTENT_TYPES:
        raise InvalidFileType(content_type=content_type)
    return normalized


def validate_file_size(size_bytes):
    if size_bytes is None or size_bytes <= 0:
        raise EmptyFile()
    if size_bytes > settings.MAX_UPLOAD_SIZE:
        raise FileTooLarge(size_bytes=size_bytes)
    return size_bytes


def validate_upload(content_type, size_bytes):
    """Apply the file-type allow-list, then the size ceiling."""
    content_type = validate_content_type(content_type)
    validate_file_size(size_bytes)
    return content_type


def normalize_invite_code(code):
    """Case-normalize a user-entered code; raises MalformedInviteCode."""
    normalized = (code or '').strip().upper()
    if len(normalized) != settings.INVITE_CODE_LENGTH or not _INVITE_CODE_RE.match(normalized):
        raise MalformedInviteCode()
    return normalized


def normalize_mobile(mobile):
    """Strip spaces and dashes; require 10 to 15 digits with an optional leading +."""
    normalized = re.sub(r'[\s\-()]', '', mobile or '')
    if not _PHONE_RE.match(normalized):
        raise InvalidPhoneNumber()
    return normalized
