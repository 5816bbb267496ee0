from __future__ import annotations

import pytest

from apps.common.errors import (
    EmptyFile,
    FileTooLarge,
    InvalidFileType,
    InvalidInput,
    InvalidPhoneNumber,
    MalformedInviteCode,
)
from apps.common.validators import normalize_invite_code, normalize_mobile, validate_upload

MIB = 1024 * 1024


@pytest.mark.parametrize(
    "content_type",
    [
        "application/pdf",
        "image/jpeg",
        "image/png",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ],
)
def test_allowed_types(content_type):
    assert validate_upload(content_type, 1024) == content_type


@pytest.mark.parametrize("content_type", ["text/plain", "image/gif", "", None])
def test_disallowed_types(content_type):
    with pytest.raises(InvalidFileType):
        validate_upload(content_type, 1024)


def test_size_ceiling_is_inclusive():
    assert validate_upload("application/pdf", 5 * MIB) == "application/pdf"
    with pytest.raises(FileTooLarge):
        validate_upload("application/pdf", 5 * MIB + 1)
    with pytest.raises(EmptyFile):
        validate_upload("application/pdf", 0)


def test_type_is_checked_before_size():
    with pytest.raises(InvalidFileType):
        validate_upload("text/plain", 6 * MIB)


def test_invite_code_normalization():
    assert normalize_invite_code(" ab12cd ") == "AB12CD"
    for bad in ["AB12C", "AB12CDE", "AB 2CD", "ÄB12CD", None]:
        with pytest.raises(MalformedInviteCode):
            normalize_invite_code(bad)


def test_mobile_normalization():
    assert normalize_mobile("+91 (987) 654-3210") == "+919876543210"
    assert normalize_mobile("9876543210") == "9876543210"
    with pytest.raises(InvalidPhoneNumber):
        normalize_mobile("98765")


def test_errors_share_the_input_base():
    for error in (InvalidFileType, FileTooLarge, EmptyFile, MalformedInviteCode, InvalidPhoneNumber):
        assert issubclass(error, InvalidInput)
        assert error.http_status == 400
