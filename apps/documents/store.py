"""
Document Store: owner-scoped persistence of Document records.

Services receive a store instance instead of touching the ORM directly so
tests can swap in doubles.
"""
import logging

from django.core.exceptions import ValidationError

from apps.common.errors import DocumentNotFound, NotDocumentOwner

from .models import Document

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'insurance_type', 'policy_number', 'provider', 'premium', 'due_date')


class DocumentStore:
    def create(self, owner_id, **fields):
        document = Document.objects.create(owner_id=owner_id, **fields)
        logger.info("Stored document %s for owner %s", document.id, owner_id)
        return document

    def get(self, document_id):
        try:
            return Document.objects.get(pk=document_id)
        except (Document.DoesNotExist, ValidationError, ValueError):
            raise DocumentNotFound(document_id=document_id)

    def get_owned(self, owner_id, document_id):
        """Fetch a document and require that `owner_id` owns it."""
        document = self.get(document_id)
        if document.owner_id != owner_id:
            raise NotDocumentOwner(document_id=document_id)
        return document

    def list_for_owner(self, owner_id):
        return list(Document.objects.filter(owner_id=owner_id))

    def list_for_owners(self, owner_ids):
        owner_ids = list(owner_ids)
        if not owner_ids:
            return []
        return list(Document.objects.filter(owner_id__in=owner_ids))

    def count_by_owner(self, owner_ids):
        counts = {owner_id: 0 for owner_id in owner_ids}
        for owner_id in Document.objects.filter(owner_id__in=list(owner_ids)).values_list('owner_id', flat=True):
            counts[owner_id] += 1
        return counts

    def update(self, document, **fields):
        changed = [name for name in fields if name in EDITABLE_FIELDS]
        for name in changed:
            setattr(document, name, fields[name])
        document.save(update_fields=changed + ['updated_at'])
        return document

    def delete(self, document):
        document_id = document.id
        document.delete()
        logger.info("Deleted document %s", document_id)
