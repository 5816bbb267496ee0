"""
Shared fixtures for the vault tests.

- Users: `make_user` factory plus ready-made `owner`, `viewer`, `stranger`
- Blob store: in-memory double patched into the ingestion pipeline
- API: DRF `APIClient` and an authenticated-client helper
- PDFs: generated on the fly with PyMuPDF
- Races: `unseen_rows` hides committed rows from existence checks
"""
import itertools

import fitz
import pytest
from django.core.cache import cache
from django.db.models.query import QuerySet
from rest_framework.test import APIClient

from apps.authentication.models import User


# =============================================================================
# CACHE
# =============================================================================


@pytest.fixture(autouse=True)
def clear_cache():
    # Shared views, OTPs and throttling counters all live in the cache
    cache.clear()
    yield
    cache.clear()


# =============================================================================
# USERS
# =============================================================================

_mobiles = itertools.count(1)


@pytest.fixture
def make_user(db):
    def _make(first_name="Test", last_name="User", verified=True, mobile=None, **extra):
        return User.objects.create_user(
            mobile=mobile or f"+91900000{next(_mobiles):04d}",
            first_name=first_name,
            last_name=last_name,
            is_phone_verified=verified,
            **extra,
        )

    return _make


@pytest.fixture
def owner(make_user):
    return make_user("Alice", "Owner")


@pytest.fixture
def viewer(make_user):
    return make_user("Bob", "Viewer")


@pytest.fixture
def stranger(make_user):
    return make_user("Carol", "Stranger")


# =============================================================================
# RACES
# =============================================================================


@pytest.fixture
def unseen_rows(monkeypatch):
    """
    Make `exists()` report no rows for the given model, as when another
    transaction inserts a conflicting row between a check and the write.
    """
    original_exists = QuerySet.exists

    def hide(model):
        def exists(queryset):
            if queryset.model is model:
                return False
            return original_exists(queryset)

        monkeypatch.setattr(QuerySet, "exists", exists)

    return hide


# =============================================================================
# BLOB STORE
# =============================================================================


class InMemoryBlobStore:
    def __init__(self):
        self.blobs = {}
        self.deleted = []

    def store(self, data, key, content_type="application/octet-stream"):
        self.blobs[key] = bytes(data)
        return key

    def fetch(self, key):
        return self.blobs[key]

    def delete(self, key):
        self.deleted.append(key)
        return self.blobs.pop(key, None) is not None

    def url_for(self, key, expiration=None):
        return f"memory://{key}"


@pytest.fixture
def blob_store(monkeypatch):
    store = InMemoryBlobStore()
    monkeypatch.setattr("apps.documents.pipeline.get_blob_store", lambda: store)
    return store


# =============================================================================
# PDFS
# =============================================================================


@pytest.fixture
def make_pdf():
    """Build a PDF whose pages carry the given text blocks, one per page."""

    def _make(*pages):
        with fitz.open() as pdf:
            for text in pages or ("",):
                page = pdf.new_page()
                page.insert_text((72, 72), text, fontsize=11)
            return pdf.tobytes()

    return _make


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    return _client
