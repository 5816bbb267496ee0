"""
Sharing Service.

Orchestrates invite codes (InviteRegistry), grants (AccessGraph) and the
documents a viewer may see (DocumentStore). Every mutator returns a result
carrying a ViewInvalidation that has already been applied to the shared-view
cache, so the next read is fresh.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from django.conf import settings

from apps.authentication.identity import UserDirectory
from apps.authentication.rate_limiting import (
    check_code_attempt_limit, increment_failed_attempts, clear_failed_attempts,
)
from apps.common.errors import (
    AlreadyConnected, GrantAlreadyExists, InvalidInviteCode, InviteCodeNotFound,
    RateLimited, SelfRedeem, UserNotFound,
)
from apps.common.validators import normalize_invite_code
from apps.documents.store import DocumentStore
from apps.integrations.notifications import SMSNotifier

from .cache import ViewInvalidation, apply_invalidation, get_shared_view, set_shared_view
from .graph import AccessGraph
from .registry import InviteRegistry

logger = logging.getLogger(__name__)


@dataclass
class RotationResult:
    code: str
    invalidation: ViewInvalidation = field(default_factory=ViewInvalidation)


@dataclass
class RedeemResult:
    owner_id: int
    owner_name: str
    invalidation: ViewInvalidation = field(default_factory=ViewInvalidation)


@dataclass
class RevokeResult:
    removed: bool
    invalidation: ViewInvalidation = field(default_factory=ViewInvalidation)


@dataclass
class GrantedViewer:
    viewer_id: int
    display_name: str
    granted_at: Optional[datetime] = None


@dataclass
class SharingOwner:
    owner_id: int
    display_name: str
    document_count: int


@dataclass
class SharedDocument:
    document: object
    owner_name: str


class SharingService:
    redeem_action = 'invite_redeem'

    def __init__(self, registry=None, graph=None, documents=None, directory=None, notifier=None):
        self.registry = registry or InviteRegistry()
        self.graph = graph or AccessGraph()
        self.documents = documents or DocumentStore()
        self.directory = directory or UserDirectory()
        self.notifier = notifier or SMSNotifier()

    # ==================== INVITE CODES ====================

    def rotate_invite_code(self, owner_id):
        """Issue a fresh code; existing grants are untouched."""
        code = self.registry.issue(owner_id)
        return RotationResult(code=code)

    def get_my_invite_code(self, owner_id):
        return self.registry.get_code(owner_id)

    def redeem(self, code, viewer_id):
        """
        Turn an owner's invite code into an access grant for `viewer_id`.

        Raises MalformedInviteCode, RateLimited, InvalidInviteCode, SelfRedeem
        or AlreadyConnected. Only unknown codes count towards the throttle.
        """
        normalized = normalize_invite_code(code)

        is_allowed, _, reset_time = check_code_attempt_limit(
            viewer_id,
            action=self.redeem_action,
            max_attempts=settings.INVITE_REDEEM_MAX_ATTEMPTS,
            window_minutes=settings.INVITE_REDEEM_WINDOW_MINUTES,
        )
        if not is_allowed:
            raise RateLimited(message=f"Too many invalid invite codes. Try again in {reset_time} seconds.")

        try:
            owner_id = self.registry.resolve(normalized)
        except InviteCodeNotFound:
            remaining = increment_failed_attempts(
                viewer_id,
                action=self.redeem_action,
                max_attempts=settings.INVITE_REDEEM_MAX_ATTEMPTS,
                window_minutes=settings.INVITE_REDEEM_WINDOW_MINUTES,
            )
            logger.warning("Unknown invite code from viewer %s (%s attempts left)", viewer_id, remaining)
            raise InvalidInviteCode()

        if owner_id == viewer_id:
            raise SelfRedeem()

        try:
            self.graph.grant(owner_id, viewer_id)
        except GrantAlreadyExists:
            raise AlreadyConnected()

        clear_failed_attempts(viewer_id, action=self.redeem_action)
        invalidation = apply_invalidation(ViewInvalidation(shared_documents={viewer_id}), sender=self.__class__)
        logger.info("Viewer %s redeemed invite of owner %s", viewer_id, owner_id)

        self._notify_owner(owner_id, viewer_id)
        return RedeemResult(
            owner_id=owner_id,
            owner_name=self.directory.display_name(owner_id),
            invalidation=invalidation,
        )

    def _notify_owner(self, owner_id, viewer_id):
        try:
            owner = self.directory.get_user_by_id(owner_id)
        except UserNotFound:
            return
        viewer_name = self.directory.display_name(viewer_id)
        self.notifier.notify(owner, f"{viewer_name} can now view your insurance documents.")

    # ==================== GRANTS ====================

    def revoke_access(self, owner_id, viewer_id):
        """Idempotent: revoking a missing grant succeeds with nothing invalidated."""
        removed = self.graph.revoke(owner_id, viewer_id)
        invalidation = ViewInvalidation(shared_documents={viewer_id}) if removed else ViewInvalidation()
        return RevokeResult(removed=removed, invalidation=apply_invalidation(invalidation, sender=self.__class__))

    def list_granted_viewers(self, owner_id):
        grants = self.graph.grants_from(owner_id)
        profiles = self.directory.get_profiles(grant.viewer_id for grant in grants)
        return [
            GrantedViewer(
                viewer_id=grant.viewer_id,
                display_name=self.directory.display_name(grant.viewer_id, profiles),
                granted_at=grant.created_at,
            )
            for grant in grants
        ]

    # ==================== SHARED VIEWS ====================

    def shared_documents_for(self, viewer_id):
        """
        Documents of every owner who granted `viewer_id` access, with owner names.

        Only the document list is cached; owner names are looked up on each read.
        """
        version, documents = get_shared_view(viewer_id)
        if documents is None:
            owner_ids = self.graph.owners_visible_to(viewer_id)
            documents = list(self.documents.list_for_owners(owner_ids))
            set_shared_view(viewer_id, version, documents)

        profiles = self.directory.get_profiles({document.owner_id for document in documents})
        return [
            SharedDocument(
                document=document,
                owner_name=self.directory.display_name(document.owner_id, profiles),
            )
            for document in documents
        ]

    def list_sharing_owners(self, viewer_id):
        owner_ids = self.graph.owners_visible_to(viewer_id)
        profiles = self.directory.get_profiles(owner_ids)
        counts = self.documents.count_by_owner(owner_ids)
        owners = [
            SharingOwner(
                owner_id=owner_id,
                display_name=self.directory.display_name(owner_id, profiles),
                document_count=counts.get(owner_id, 0),
            )
            for owner_id in owner_ids
        ]
        return sorted(owners, key=lambda owner: (owner.display_name.lower(), owner.owner_id))
