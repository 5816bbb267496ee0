"""
Cache-invalidation contract for document views.

Mutations report which users' views changed as a ViewInvalidation. Applying
it bumps the per-viewer version of the cached shared view, so the next read
recomputes, and notifies in-process listeners through `views_invalidated`.
"""
import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.core.cache import cache
from django.dispatch import Signal

logger = logging.getLogger(__name__)

views_invalidated = Signal()


@dataclass
class ViewInvalidation:
    my_documents: set = field(default_factory=set)
    shared_documents: set = field(default_factory=set)

    def as_dict(self):
        return {
            'my_documents': sorted(self.my_documents),
            'shared_documents': sorted(self.shared_documents),
        }


def _version_key(viewer_id):
    return f"shared_documents_version:{viewer_id}"


def _view_key(viewer_id, version):
    return f"shared_documents:{viewer_id}:{version}"


def _current_version(viewer_id):
    key = _version_key(viewer_id)
    cache.add(key, 1, timeout=None)
    return cache.get(key) or 1


def get_shared_view(viewer_id):
    """Cached shared view of a viewer, or None. Returns (version, value)."""
    version = _current_version(viewer_id)
    return version, cache.get(_view_key(viewer_id, version))


def set_shared_view(viewer_id, version, value):
    cache.set(_view_key(viewer_id, version), value, timeout=settings.SHARED_VIEW_CACHE_TIMEOUT)


def invalidate_shared_view(viewer_id):
    key = _version_key(viewer_id)
    try:
        cache.incr(key)
    except ValueError:
        cache.set(key, 2, timeout=None)


def apply_invalidation(invalidation, sender=None):
    for viewer_id in invalidation.shared_documents:
        invalidate_shared_view(viewer_id)
    if invalidation.my_documents or invalidation.shared_documents:
        logger.debug("Invalidated views: %s", invalidation.as_dict())
        views_invalidated.send(sender=sender or ViewInvalidation, invalidation=invalidation)
    return invalidation
