"""File storage: document binaries in MinIO."""

import io
import logging
from datetime import timedelta

from minio import Minio
from minio.error import S3Error

from hr_backend.core.config import Settings
from hr_backend.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class FileStorage:
    """Stores, serves and removes document objects in one MinIO bucket."""

    def __init__(self, settings: Settings):
        self.client = Minio(
            settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SECURE,
        )
        self.bucket = settings.MINIO_BUCKET

    def ensure_bucket(self) -> None:
        """Create the default bucket if it doesn't exist."""
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)

    def put_object(self, key: str, content: bytes, content_type: str) -> str:
        """Upload ``content`` under ``key`` and return the key."""
        try:
            self.client.put_object(
                self.bucket,
                key,
                io.BytesIO(content),
                length=len(content),
                content_type=content_type or "application/octet-stream",
            )
        except S3Error as e:
            raise StorageError(f"Failed to upload to MinIO: {e}")
        return key

    def get_presigned_url(self, key: str, expires_minutes: int = 15) -> str:
        """Generate a presigned download URL for a stored object."""
        try:
            return self.client.presigned_get_object(
                self.bucket, key, expires=timedelta(minutes=expires_minutes)
            )
        except S3Error as e:
            raise StorageError(f"Failed to generate presigned URL: {e}")

    def delete_object(self, key: str) -> None:
        """Delete an object from MinIO."""
        try:
            self.client.remove_object(self.bucket, key)
        except S3Error as e:
            raise StorageError(f"Failed to delete from MinIO: {e}")
