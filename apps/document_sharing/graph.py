"""
Access Graph: directed owner -> viewer grants.
"""
import logging

from django.db import IntegrityError, transaction

from apps.authentication.models import User
from apps.common.errors import GrantAlreadyExists, SelfGrant, UserNotFound

from .models import AccessGrant

logger = logging.getLogger(__name__)


class AccessGraph:
    def grant(self, owner_id, viewer_id):
        if owner_id == viewer_id:
            raise SelfGrant()

        with transaction.atomic():
            # One writer per owner at a time
            if not User.objects.select_for_update().filter(pk=owner_id).exists():
                raise UserNotFound(user_id=owner_id)

            if AccessGrant.objects.filter(owner_id=owner_id, viewer_id=viewer_id).exists():
                raise GrantAlreadyExists()
            try:
                with transaction.atomic():
                    grant = AccessGrant.objects.create(owner_id=owner_id, viewer_id=viewer_id)
            except IntegrityError:
                raise GrantAlreadyExists()

        logger.info("Granted owner %s -> viewer %s", owner_id, viewer_id)
        return grant

    def revoke(self, owner_id, viewer_id):
        """Remove the edge if present. Returns whether anything was removed."""
        deleted, _ = AccessGrant.objects.filter(owner_id=owner_id, viewer_id=viewer_id).delete()
        if deleted:
            logger.info("Revoked owner %s -> viewer %s", owner_id, viewer_id)
        return bool(deleted)

    def has_access(self, owner_id, viewer_id):
        return AccessGrant.objects.filter(owner_id=owner_id, viewer_id=viewer_id).exists()

    def grants_from(self, owner_id):
        return list(AccessGrant.objects.filter(owner_id=owner_id))

    def viewers_of(self, owner_id):
        return set(AccessGrant.objects.filter(owner_id=owner_id).values_list('viewer_id', flat=True))

    def owners_visible_to(self, viewer_id):
        return set(AccessGrant.objects.filter(viewer_id=viewer_id).values_list('owner_id', flat=True))
