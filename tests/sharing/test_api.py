from __future__ import annotations

import pytest

from apps.document_sharing.graph import AccessGraph
from apps.documents.store import DocumentStore

INVITE_URL = "/api/vault/invite-code/"
REDEEM_URL = "/api/vault/invite-code/redeem/"
SHARED_URL = "/api/vault/shared/"
OWNERS_URL = "/api/vault/shared/owners/"
VIEWERS_URL = "/api/vault/viewers/"
ME_URL = "/api/auth/me/"


@pytest.fixture
def owner_client(client_for, owner):
    return client_for(owner)


@pytest.fixture
def viewer_client(client_for, viewer):
    return client_for(viewer)


def issue_code(client):
    response = client.post(INVITE_URL)
    assert response.status_code == 201
    return response.data["code"]


def test_invite_code_lifecycle(owner_client):
    assert owner_client.get(INVITE_URL).data == {"code": None}

    first = issue_code(owner_client)
    second = issue_code(owner_client)

    assert first != second
    assert owner_client.get(INVITE_URL).data == {"code": second}


def test_redeem_and_list_shared(owner, viewer, owner_client, viewer_client):
    DocumentStore().create(
        owner.id, name="Health Insurance Document", original_filename="h.pdf",
        content_type="application/pdf", size=10, content_ref="documents/h.pdf",
        policy_number="99887-XYZ",
    )
    code = issue_code(owner_client)

    response = viewer_client.post(REDEEM_URL, {"code": code.lower()}, format="json")

    assert response.status_code == 201
    assert response.data["owner_name"] == "Alice Owner"
    assert response.data["invalidate"] == {"my_documents": [], "shared_documents": [viewer.id]}

    shared = viewer_client.get(SHARED_URL).data
    assert [(d["policy_number"], d["owner_name"]) for d in shared] == [("99887-XYZ", "Alice Owner")]

    owners = viewer_client.get(OWNERS_URL).data
    assert owners == [{"owner_id": owner.id, "display_name": "Alice Owner", "document_count": 1}]


def test_shared_list_follows_owner_profile_edits(owner_client, viewer_client, owner):
    DocumentStore().create(
        owner.id, name="Auto Insurance Document", original_filename="a.pdf",
        content_type="application/pdf", size=10, content_ref="documents/a.pdf",
    )
    viewer_client.post(REDEEM_URL, {"code": issue_code(owner_client)}, format="json")
    assert [d["owner_name"] for d in viewer_client.get(SHARED_URL).data] == ["Alice Owner"]

    response = owner_client.patch(ME_URL, {"first_name": "Renamed"}, format="json")

    assert response.status_code == 200
    assert [d["owner_name"] for d in viewer_client.get(SHARED_URL).data] == ["Renamed Owner"]


@pytest.mark.parametrize(
    "code, status_code, error_code",
    [
        ("ZZ99ZZ", 404, "invalid_code"),
        ("AB-1", 400, "malformed_code"),
    ],
)
def test_redeem_bad_codes(viewer_client, code, status_code, error_code):
    response = viewer_client.post(REDEEM_URL, {"code": code}, format="json")

    assert response.status_code == status_code
    assert response.data["code"] == error_code
    assert response.data["error"]


def test_redeem_own_code(owner_client):
    code = issue_code(owner_client)

    response = owner_client.post(REDEEM_URL, {"code": code}, format="json")

    assert response.status_code == 409
    assert response.data == {"error": "You cannot use your own invite code.", "code": "self_redeem"}


def test_redeem_twice(owner_client, viewer_client):
    code = issue_code(owner_client)
    viewer_client.post(REDEEM_URL, {"code": code}, format="json")

    response = viewer_client.post(REDEEM_URL, {"code": code}, format="json")

    assert response.status_code == 409
    assert response.data["code"] == "already_connected"


def test_viewers_list_and_revoke(owner, viewer, owner_client, viewer_client):
    AccessGraph().grant(owner.id, viewer.id)

    viewers = owner_client.get(VIEWERS_URL).data
    assert [(v["viewer_id"], v["display_name"]) for v in viewers] == [(viewer.id, "Bob Viewer")]

    first = owner_client.delete(f"{VIEWERS_URL}{viewer.id}/")
    second = owner_client.delete(f"{VIEWERS_URL}{viewer.id}/")

    assert first.status_code == 200 and first.data["removed"] is True
    assert second.status_code == 200 and second.data["removed"] is False
    assert viewer_client.get(SHARED_URL).data == []


def test_viewer_cannot_revoke_on_owners_behalf(owner, viewer, viewer_client):
    AccessGraph().grant(owner.id, viewer.id)

    # Revoking acts on the caller's own grants only
    response = viewer_client.delete(f"{VIEWERS_URL}{viewer.id}/")

    assert response.data["removed"] is False
    assert AccessGraph().has_access(owner.id, viewer.id)


def test_unverified_user_is_forbidden(make_user, client_for):
    client = client_for(make_user("Dan", "Pending", verified=False))

    assert client.post(INVITE_URL).status_code == 403
    assert client.get(SHARED_URL).status_code == 403


def test_anonymous_user_is_rejected(api_client, db):
    assert api_client.get(SHARED_URL).status_code == 401
