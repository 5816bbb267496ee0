from __future__ import annotations

import re

import pytest

from apps.common.errors import InviteCodeNotFound, UserNotFound
from apps.document_sharing.models import InviteCode
from apps.document_sharing.registry import InviteRegistry


@pytest.fixture
def registry():
    return InviteRegistry()


def scripted(*codes):
    """generate_code replacement that hands out the given codes in order."""
    remaining = iter(codes)
    return lambda: next(remaining)


def test_issue_generates_uppercase_alphanumeric_code(registry, owner):
    code = registry.issue(owner.id)
    assert re.fullmatch(r"[A-Z0-9]{6}", code)
    assert registry.resolve(code) == owner.id


def test_rotation_invalidates_previous_code(registry, owner):
    first = registry.issue(owner.id)
    second = registry.issue(owner.id)

    assert first != second
    assert registry.resolve(second) == owner.id
    with pytest.raises(InviteCodeNotFound):
        registry.resolve(first)
    assert InviteCode.objects.filter(owner=owner).count() == 1


def test_resolve_is_case_insensitive(registry, owner):
    registry.generate_code = scripted("AB12CD")
    registry.issue(owner.id)

    assert registry.resolve("ab12cd") == owner.id
    assert registry.resolve("  Ab12Cd ") == owner.id


def test_unknown_code_is_not_found(registry, db):
    with pytest.raises(InviteCodeNotFound):
        registry.resolve("ZZ99ZZ")


def test_collision_with_active_code_is_retried(registry, owner, viewer):
    InviteCode.objects.create(owner=viewer, code="TAKEN1")
    registry.generate_code = scripted("TAKEN1", "FRESH1")

    assert registry.issue(owner.id) == "FRESH1"
    assert registry.resolve("TAKEN1") == viewer.id


def test_code_taken_concurrently_is_retried(registry, owner, viewer, unseen_rows):
    InviteCode.objects.create(owner=viewer, code="TAKEN1")
    unseen_rows(InviteCode)
    registry.generate_code = scripted("TAKEN1", "FRESH1")

    assert registry.issue(owner.id) == "FRESH1"
    assert InviteCode.objects.get(code="TAKEN1").owner_id == viewer.id
    assert InviteCode.objects.get(owner=owner).code == "FRESH1"


def test_superseded_code_can_be_reissued(registry, owner, viewer):
    registry.generate_code = scripted("OLD123", "NEW123", "OLD123")
    registry.issue(owner.id)
    registry.issue(owner.id)

    assert registry.issue(viewer.id) == "OLD123"
    assert registry.resolve("OLD123") == viewer.id


def test_gives_up_after_max_attempts(owner, viewer):
    InviteCode.objects.create(owner=viewer, code="TAKEN1")
    registry = InviteRegistry(max_attempts=3)
    registry.generate_code = lambda: "TAKEN1"

    with pytest.raises(RuntimeError):
        registry.issue(owner.id)
    assert registry.get_code(owner.id) is None


def test_issue_for_unknown_user(registry, db):
    with pytest.raises(UserNotFound):
        registry.issue(987654)


def test_get_code(registry, owner):
    assert registry.get_code(owner.id) is None
    code = registry.issue(owner.id)
    assert registry.get_code(owner.id) == code
