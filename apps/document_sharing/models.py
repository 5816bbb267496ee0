"""
Document Sharing models.

An owner hands out one invite code at a time; redeeming it creates a
directed owner -> viewer grant covering all of the owner's documents.
"""
from django.db import models
from django.db.models import F, Q
from django.conf import settings


class InviteCode(models.Model):
    """The single active invite code of an owner. Rotation overwrites the row."""
    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='invite_code',
    )
    code = models.CharField(max_length=16, unique=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    rotated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.code} -> {self.owner_id}"


class AccessGrant(models.Model):
    """viewer may read every document of owner. Not transitive."""
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='grants_given',
    )
    viewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='grants_received',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['owner', 'viewer'], name='unique_access_grant'),
            models.CheckConstraint(condition=~Q(owner=F('viewer')), name='no_self_access_grant'),
        ]
        indexes = [
            models.Index(fields=['viewer']),
        ]

    def __str__(self):
        return f"Grant: {self.owner_id} -> {self.viewer_id}"
