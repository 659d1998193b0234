"""Blob storage backend for uploaded file contents."""

import logging
from dataclasses import dataclass
from typing import Any, final

from typing_extensions import override

from django.core.files.base import File as DjangoFile
from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BlobRemoval:
    """Outcome of removing a blob, `error` is set when it stayed behind."""

    location: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Tell whether the blob is gone."""
        return self.error is None


@final
class FileStorage(S3Storage):
    """S3 storage backend for uploaded file blobs.

    Extends django-storages S3Storage with:
    - Non-raising removal reporting ok or error
    - Rollback of uploads whose DB record failed
    - Streaming access for downloads
    - Logging around every write and delete
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save blob to S3 with error handling and logging.

        Args:
            name: Suggested storage location for the blob.
            content: File content (file-like object).
            max_length: Optional maximum length for the location.

        Returns:
            Actual location used (may differ from name if conflicts).

        Raises:
            Exception: If S3 upload fails.
        """
        try:
            logger.info('Uploading blob to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully uploaded blob: %s', saved_name)
        except Exception:
            logger.exception('Failed to upload blob to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete blob from S3 with error handling and logging.

        Args:
            name: Location of the blob to delete.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting blob from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted blob: %s', name)
        except Exception:
            logger.exception('Failed to delete blob from storage: %s', name)
            raise

    def remove(self, name: str) -> BlobRemoval:
        """Delete a blob without raising.

        Args:
            name: Location of the blob to delete.

        Returns:
            BlobRemoval, carrying the error message when deletion failed.
        """
        try:
            self.delete(name)
        except Exception as error:
            return BlobRemoval(
                location=name,
                error=f'{type(error).__name__}: {error}',
            )
        return BlobRemoval(location=name)

    def rollback_upload(self, name: str) -> BlobRemoval:
        """Delete an uploaded blob after its DB record failed to persist.

        A failure leaves the blob in storage as an orphan for
        ``cleanup_orphaned_blobs`` to collect.

        Args:
            name: Location of the blob to delete.

        Returns:
            Outcome of the removal.
        """
        logger.warning('Rolling back upload, deleting blob: %s', name)
        outcome = self.remove(name)
        if outcome.ok:
            logger.info('Successfully rolled back blob upload: %s', name)
        else:
            logger.error('Failed to rollback upload, orphaned blob: %s', name)
        return outcome

    def stream(self, name: str) -> tuple[DjangoFile, int]:
        """Open a blob for reading.

        Existence is not checked up front, a missing blob surfaces
        as the backend's own error.

        Args:
            name: Location of the blob.

        Returns:
            Tuple of (readable file, size in bytes).
        """
        logger.debug('Streaming blob from storage: %s', name)
        size = self.size(name)
        return self.open(name, 'rb'), size
