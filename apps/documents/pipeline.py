"""
Ingestion Pipeline: validate -> store blob -> extract -> persist -> invalidate.

Also hosts the owner-side document operations (edit, delete, read) because
they share the same invalidation rule: a change to an owner's documents
affects the owner's own list and the shared view of each of their viewers.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from django.db import transaction

from apps.common.errors import InvalidDocumentUpdate, NotDocumentOwner
from apps.common.validators import PDF_CONTENT_TYPE, validate_upload
from apps.document_sharing.cache import ViewInvalidation, apply_invalidation
from apps.document_sharing.graph import AccessGraph
from apps.integrations.blob_store import build_content_key, get_blob_store

from .extraction import ExtractionResult, FieldExtractor
from .models import NAME_MAX_LENGTH
from .store import EDITABLE_FIELDS, DocumentStore

logger = logging.getLogger(__name__)

GENERIC_DOCUMENT_LABEL = 'Insurance Document'


def display_name_for(extraction, file_name):
    if extraction.insurance_type:
        return f"{extraction.insurance_type} {GENERIC_DOCUMENT_LABEL}"
    return f"{GENERIC_DOCUMENT_LABEL} - {file_name}"[:NAME_MAX_LENGTH]


@dataclass
class DocumentChange:
    document: Optional[object]
    invalidation: ViewInvalidation = field(default_factory=ViewInvalidation)


@dataclass
class DocumentAccess:
    document: object
    download_url: Optional[str]
    is_owner: bool


class IngestionPipeline:
    def __init__(self, store=None, blob_store=None, extractor=None, graph=None):
        self.store = store or DocumentStore()
        self.blob_store = blob_store or get_blob_store()
        self.extractor = extractor or FieldExtractor()
        self.graph = graph or AccessGraph()

    def _invalidate_owner(self, owner_id):
        invalidation = ViewInvalidation(
            my_documents={owner_id},
            shared_documents=self.graph.viewers_of(owner_id),
        )
        return apply_invalidation(invalidation, sender=self.__class__)

    def upload(self, owner_id, file_bytes, file_name, content_type, size_bytes):
        """
        Store a new document for `owner_id`.

        Raises InvalidFileType, FileTooLarge or EmptyFile before anything is
        written. Only PDFs go through field extraction; every other accepted
        type is stored with all extracted fields empty.
        """
        content_type = validate_upload(content_type, size_bytes)

        if content_type == PDF_CONTENT_TYPE:
            extraction = self.extractor.extract(file_bytes)
        else:
            extraction = ExtractionResult()

        key = self.blob_store.store(file_bytes, build_content_key(owner_id, file_name), content_type)
        try:
            with transaction.atomic():
                document = self.store.create(
                    owner_id,
                    name=display_name_for(extraction, file_name),
                    original_filename=file_name[:NAME_MAX_LENGTH],
                    content_type=content_type,
                    size=size_bytes,
                    content_ref=key,
                    **extraction.as_dict(),
                )
        except Exception:
            logger.error("Document insert failed for owner %s, removing blob %s", owner_id, key)
            self.blob_store.delete(key)
            raise

        logger.info("Uploaded %s for owner %s (type=%s)", document.id, owner_id, extraction.insurance_type)
        return DocumentChange(document=document, invalidation=self._invalidate_owner(owner_id))

    def update_document_details(self, owner_id, document_id, fields):
        changes = {name: value for name, value in (fields or {}).items() if name in EDITABLE_FIELDS}
        if not changes:
            raise InvalidDocumentUpdate()

        document = self.store.get_owned(owner_id, document_id)
        document = self.store.update(document, **changes)
        return DocumentChange(document=document, invalidation=self._invalidate_owner(owner_id))

    def delete_document(self, owner_id, document_id):
        document = self.store.get_owned(owner_id, document_id)
        content_ref = document.content_ref
        self.store.delete(document)

        if not self.blob_store.delete(content_ref):
            logger.warning("Blob %s for deleted document %s was not removed", content_ref, document_id)

        return DocumentChange(document=None, invalidation=self._invalidate_owner(owner_id))

    def get_document_for(self, user_id, document_id):
        """Readable by the owner and by any viewer the owner granted access."""
        document = self.store.get(document_id)
        is_owner = document.owner_id == user_id
        if not is_owner and not self.graph.has_access(document.owner_id, user_id):
            raise NotDocumentOwner(message="You do not have access to this document.")
        return DocumentAccess(
            document=document,
            download_url=self.blob_store.url_for(document.content_ref),
            is_owner=is_owner,
        )

    def list_my_documents(self, owner_id):
        return self.store.list_for_owner(owner_id)
