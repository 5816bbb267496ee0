"""
Invite Registry: one active, case-insensitive code per owner.
"""
import logging
import secrets
import string

from django.conf import settings
from django.db import IntegrityError, transaction

from apps.authentication.models import User
from apps.common.errors import InviteCodeNotFound, UserNotFound

from .models import InviteCode

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


class InviteRegistry:
    def __init__(self, length=None, max_attempts=None):
        self.length = length or settings.INVITE_CODE_LENGTH
        self.max_attempts = max_attempts or settings.INVITE_CODE_MAX_ATTEMPTS

    def generate_code(self):
        return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(self.length))

    def issue(self, owner_id):
        """
        Replace the owner's code with a fresh one and return it. The previous
        code stops resolving as soon as this commits.
        """
        with transaction.atomic():
            # Serializes concurrent rotations for the same owner
            if not User.objects.select_for_update().filter(pk=owner_id).exists():
                raise UserNotFound(user_id=owner_id)

            for attempt in range(1, self.max_attempts + 1):
                code = self.generate_code()
                if InviteCode.objects.filter(code=code).exists():
                    logger.debug("Invite code collision on attempt %d", attempt)
                    continue
                try:
                    with transaction.atomic():
                        InviteCode.objects.update_or_create(owner_id=owner_id, defaults={'code': code})
                except IntegrityError:
                    logger.debug("Invite code taken concurrently on attempt %d", attempt)
                    continue
                logger.info("Issued invite code for owner %s", owner_id)
                return code

        raise RuntimeError(f"Could not generate a unique invite code after {self.max_attempts} attempts")

    def get_code(self, owner_id):
        return InviteCode.objects.filter(owner_id=owner_id).values_list('code', flat=True).first()

    def resolve(self, code):
        """Owner id of the active code; raises InviteCodeNotFound."""
        normalized = (code or '').strip().upper()
        owner_id = InviteCode.objects.filter(code=normalized).values_list('owner_id', flat=True).first()
        if owner_id is None:
            raise InviteCodeNotFound()
        return owner_id
