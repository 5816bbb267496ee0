"""
Blob storage for uploaded document content.

The vault only ever keeps the returned content reference (an object key).
S3 is the production backend; the local backend writes under MEDIA_ROOT and
is used for development and tests.
"""
import logging
import uuid
from pathlib import Path

import boto3
from botocore.exceptions import ClientError
from django.conf import settings

logger = logging.getLogger(__name__)


def get_s3_client():
    """Returns a boto3 S3 client using settings."""
    return boto3.client(
        's3',
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        region_name=settings.AWS_S3_REGION_NAME
    )


def build_content_key(owner_id, filename):
    """Standardized key: documents/{owner_id}/{uuid}{ext}."""
    ext = Path(filename or '').suffix.lower()
    return f"documents/{owner_id}/{uuid.uuid4()}{ext}"


class S3BlobStore:
    def __init__(self, client=None, bucket=None):
        self.client = client or get_s3_client()
        self.bucket = bucket or settings.AWS_STORAGE_BUCKET_NAME

    def store(self, data, key, content_type='application/octet-stream'):
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        logger.info("Stored %d bytes at s3://%s/%s", len(data), self.bucket, key)
        return key

    def fetch(self, key):
        response = self.client.get_object(Bucket=self.bucket, Key=key)
        return response['Body'].read()

    def delete(self, key):
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
            logger.info("Deleted S3 object: %s", key)
            return True
        except ClientError as e:
            logger.error("Error deleting S3 key %s: %s", key, e)
            return False

    def url_for(self, key, expiration=None):
        """Presigned GET URL, or None when signing fails."""
        try:
            return self.client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': key},
                ExpiresIn=expiration or settings.PRESIGNED_URL_EXPIRY,
            )
        except ClientError as e:
            logger.error("Error generating presigned URL for key %s: %s", key, e)
            return None


class LocalBlobStore:
    def __init__(self, root=None):
        self.root = Path(root or settings.MEDIA_ROOT)

    def _path(self, key):
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    def store(self, data, key, content_type='application/octet-stream'):
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Stored %d bytes at %s", len(data), path)
        return key

    def fetch(self, key):
        return self._path(key).read_bytes()

    def delete(self, key):
        try:
            self._path(key).unlink()
            return True
        except FileNotFoundError:
            logger.warning("Local blob already gone: %s", key)
            return False

    def url_for(self, key, expiration=None):
        return f"{settings.MEDIA_URL}{key}"


def get_blob_store():
    """Blob store configured by BLOB_STORE_BACKEND."""
    if settings.BLOB_STORE_BACKEND == 'local':
        return LocalBlobStore()
    return S3BlobStore()
