"""
Documents models.
"""
from django.db import models
from django.conf import settings
import uuid

from .extraction import FIELD_MAX_LENGTHS

NAME_MAX_LENGTH = 255


class Document(models.Model):
    """One uploaded insurance file: metadata, content reference and extracted fields."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='documents',
        editable=False,
    )

    name = models.CharField(max_length=NAME_MAX_LENGTH)
    original_filename = models.CharField(max_length=NAME_MAX_LENGTH)
    content_type = models.CharField(max_length=100)
    size = models.BigIntegerField(default=0)
    content_ref = models.CharField(max_length=500)

    # Best-effort extraction; every field may stay empty
    insurance_type = models.CharField(max_length=FIELD_MAX_LENGTHS['insurance_type'], null=True, blank=True)
    policy_number = models.CharField(max_length=FIELD_MAX_LENGTHS['policy_number'], null=True, blank=True)
    provider = models.CharField(max_length=FIELD_MAX_LENGTHS['provider'], null=True, blank=True)
    premium = models.CharField(max_length=FIELD_MAX_LENGTHS['premium'], null=True, blank=True)
    due_date = models.CharField(max_length=FIELD_MAX_LENGTHS['due_date'], null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['owner', '-created_at']),
        ]

    def __str__(self):
        return f"{self.name} ({self.owner_id})"
