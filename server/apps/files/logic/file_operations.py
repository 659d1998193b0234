"""Business logic for the file lifecycle.

``FileLifecycleManager`` covers upload, detail, download, delete and
folder reassignment. Every operation fetches the record first and then
asks ``access_policy`` whether the principal may proceed; a refusal is
reported exactly like a missing file.

The blob storage backend is injected. ``get_lifecycle_manager`` wires it
to Django's default storage.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Final

from django.core.files.base import File as DjangoFile
from django.core.files.storage import default_storage
from django.db import DatabaseError, transaction
from django.db.models import QuerySet

from server.apps.files.exceptions import (
    AuthenticationRequiredError,
    ResourceNotFoundError,
    StoreFailureError,
    ValidationFailedError,
)
from server.apps.files.infrastructure.metadata import (
    detect_mime_type,
    extract_filename,
    generate_blob_name,
    get_file_size,
    validate_upload,
)
from server.apps.files.logic.access_policy import (
    Principal,
    can_mutate,
    can_read,
    is_authenticated,
    is_owner,
)
from server.apps.files.logic.folder_resolver import (
    FolderRef,
    list_owner_folders,
    resolve_or_clear,
    resolve_or_fail,
)
from server.apps.files.models import File, Folder

if TYPE_CHECKING:
    from server.apps.files.infrastructure.storage import FileStorage

logger = logging.getLogger(__name__)

_FILE_RESOURCE: Final = 'File'


@dataclass(frozen=True, slots=True)
class FileDetail:
    """File record plus context for its detail page.

    ``folders`` lists the owner's folders and is empty for non-owners.
    """

    file: File
    folders: list[Folder]
    can_edit: bool


@dataclass(frozen=True, slots=True)
class DownloadTarget:
    """Where a readable file lives and how to name it for the client."""

    location: str
    original_name: str
    mime_type: str


@dataclass(frozen=True, slots=True)
class DeleteResult:
    """Outcome of a delete.

    The record is always gone. When the blob could not be removed,
    ``blob_removed`` is False and ``warnings`` says why.
    """

    file_id: int
    location: str
    blob_removed: bool
    warnings: tuple[str, ...] = ()

    @property
    def is_partial(self) -> bool:
        """Tell whether the delete left an orphaned blob behind."""
        return not self.blob_removed


class FileLifecycleManager:
    """Create, read, move and delete files on behalf of a principal."""

    def __init__(self, storage: 'FileStorage') -> None:
        """Initialize the manager.

        Args:
            storage: Blob storage backend.
        """
        self._storage = storage

    def upload_file(  # noqa: WPS211
        self,
        principal: Principal,
        file_obj: BinaryIO | DjangoFile | None,
        *,
        original_name: str | None = None,
        mime_type: str | None = None,
        description: str = '',
        is_public: bool = False,
        folder_id: FolderRef = None,
    ) -> File:
        """Store an uploaded blob and create its record.

        Transaction safety: the blob is stored first, then the record is
        created in a transaction. If the record fails, the blob is removed
        again (best effort). An unknown or foreign folder does not fail
        the upload, the file is created unfiled instead.

        Args:
            principal: Uploading user.
            file_obj: Uploaded content.
            original_name: Name supplied by the uploader, defaults to
                ``file_obj.name``.
            mime_type: Declared MIME type, defaults to the upload's
                ``content_type`` or a guess from the name.
            description: Optional free-text description.
            is_public: Whether anyone may read the file.
            folder_id: Requested folder reference.

        Returns:
            Created File instance.

        Raises:
            AuthenticationRequiredError: If the principal is anonymous.
            ValidationFailedError: If the upload is missing or rejected.
            StoreFailureError: If storing the blob or the record fails.
        """
        if not is_authenticated(principal):
            raise AuthenticationRequiredError('Login required to upload files')
        if file_obj is None:
            raise ValidationFailedError('No file uploaded')

        original_name = Path(
            original_name or getattr(file_obj, 'name', None) or '',
        ).name
        if not original_name:
            raise ValidationFailedError('Uploaded file has no name')

        mime_type = (
            mime_type
            or getattr(file_obj, 'content_type', None)
            or detect_mime_type(original_name)
        )
        file_size = get_file_size(file_obj)
        validate_upload(original_name, mime_type, file_size)

        # Step 1: Store the blob
        try:
            saved_name = self._storage.save(
                generate_blob_name(original_name),
                file_obj,
            )
        except Exception as error:
            raise StoreFailureError(
                f'Unable to store file: {original_name}',
            ) from error

        # Step 2: Create the record (in transaction)
        try:
            resolved_folder_id = resolve_or_clear(
                principal.pk,  # type: ignore[union-attr]
                folder_id,
            )
            with transaction.atomic():
                file_instance = File.objects.create(
                    user=principal,
                    folder_id=resolved_folder_id,
                    blob=saved_name,
                    filename=extract_filename(saved_name),
                    original_name=original_name,
                    mime_type=mime_type,
                    size_bytes=file_size,
                    description=description or '',
                    is_public=is_public,
                )
        except Exception as error:
            # Rollback: the record is missing, so the blob must go too
            logger.exception(
                'Database transaction failed, rolling back blob upload: %s',
                saved_name,
            )
            self._storage.rollback_upload(saved_name)
            raise StoreFailureError(
                f'Unable to save file record: {original_name}',
            ) from error

        logger.info(
            'File uploaded: %s (ID: %d, user: %s, folder: %s)',
            saved_name,
            file_instance.id,
            principal.pk,  # type: ignore[union-attr]
            resolved_folder_id,
        )
        return file_instance

    def get_file_detail(self, principal: Principal, file_id: object) -> FileDetail:
        """Fetch a file the principal may read.

        Args:
            principal: Requesting user, anonymous user or None.
            file_id: File identifier.

        Returns:
            FileDetail with the owner's folders when the principal owns it.

        Raises:
            ResourceNotFoundError: If the file is missing or private to
                someone else.
        """
        file_instance = self._get_readable_file(principal, file_id)
        owner = is_owner(principal, file_instance)
        folders = list(list_owner_folders(file_instance.user_id)) if owner else []
        return FileDetail(file=file_instance, folders=folders, can_edit=owner)

    def get_download(self, principal: Principal, file_id: object) -> DownloadTarget:
        """Resolve the blob behind a readable file.

        Args:
            principal: Requesting user, anonymous user or None.
            file_id: File identifier.

        Returns:
            DownloadTarget with the blob location and the original name.

        Raises:
            ResourceNotFoundError: If the file is missing or private to
                someone else.
        """
        file_instance = self._get_readable_file(principal, file_id)
        return DownloadTarget(
            location=file_instance.location,
            original_name=file_instance.original_name,
            mime_type=file_instance.mime_type,
        )

    def open_download(self, target: DownloadTarget) -> tuple[DjangoFile, int]:
        """Open the blob of a download target.

        A blob missing from storage raises the backend's own error.

        Returns:
            Tuple of (readable file, size in bytes).
        """
        return self._storage.stream(target.location)

    def delete_file(self, principal: Principal, file_id: object) -> DeleteResult:
        """Delete a file owned by the principal.

        Two phases, not one transaction: the blob is removed first (best
        effort), then the record is removed unconditionally. A crash in
        between leaves an orphaned blob, never a record without a blob
        being deleted.

        Args:
            principal: Requesting user.
            file_id: File identifier.

        Returns:
            DeleteResult, partial when the blob could not be removed.

        Raises:
            ResourceNotFoundError: If the file is missing or not owned by
                the principal.
            StoreFailureError: If removing the record fails.
        """
        file_instance = self._get_mutable_file(principal, file_id)
        location = file_instance.location
        warnings: list[str] = []

        # Phase 1: Remove the blob (best effort)
        removal = self._storage.remove(location)
        if not removal.ok:
            # Orphaned blob is collected by cleanup_orphaned_blobs
            logger.error('Failed to delete blob (orphaned): %s', location)
            warnings.append(
                f'Blob could not be removed: {location} ({removal.error})',
            )

        # Phase 2: Remove the record
        try:
            File.objects.filter(pk=file_instance.pk).delete()
        except DatabaseError as error:
            logger.exception(
                'Failed to delete file record: ID=%d',
                file_instance.pk,
            )
            raise StoreFailureError(
                f'Unable to delete file record: {file_instance.pk}',
            ) from error

        logger.info(
            'File deleted: ID=%d, path=%s, blob removed=%s',
            file_instance.pk,
            location,
            not warnings,
        )
        return DeleteResult(
            file_id=file_instance.pk,
            location=location,
            blob_removed=not warnings,
            warnings=tuple(warnings),
        )

    def assign_folder(
        self,
        principal: Principal,
        file_id: object,
        folder_id: FolderRef,
    ) -> File:
        """Move a file into one of the owner's folders, or out of any.

        Nothing is written when the folder cannot be resolved.

        Args:
            principal: Requesting user.
            file_id: File identifier.
            folder_id: Target folder reference, empty to unfile.

        Returns:
            Updated File instance.

        Raises:
            ResourceNotFoundError: If the file is missing or not owned by
                the principal.
            ValidationFailedError: If the folder is malformed, missing or
                owned by someone else.
        """
        file_instance = self._get_mutable_file(principal, file_id)
        resolved_folder_id = resolve_or_fail(file_instance.user_id, folder_id)

        updated = File.objects.filter(pk=file_instance.pk).update(
            folder_id=resolved_folder_id,
        )
        if not updated:
            # Deleted between fetch and update
            raise ResourceNotFoundError(_FILE_RESOURCE, file_id)

        file_instance.folder_id = resolved_folder_id
        logger.info(
            'File moved: ID=%d, folder=%s',
            file_instance.pk,
            resolved_folder_id,
        )
        return file_instance

    def list_public(self) -> QuerySet[File]:
        """List public files, most recent first."""
        return (
            File.objects
            .filter(is_public=True)
            .select_related('user', 'folder')
            .order_by('-uploaded_at', '-id')
        )

    def list_owned(self, principal: Principal) -> QuerySet[File]:
        """List the principal's files, most recent first.

        Raises:
            AuthenticationRequiredError: If the principal is anonymous.
        """
        if not is_authenticated(principal):
            raise AuthenticationRequiredError('Login required to list files')
        return (
            File.objects
            .filter(user_id=principal.pk)  # type: ignore[union-attr]
            .select_related('folder')
            .order_by('-uploaded_at', '-id')
        )

    def _fetch_file(self, file_id: object) -> File:
        try:
            pk = int(file_id)  # type: ignore[call-overload]
        except (TypeError, ValueError):
            raise ResourceNotFoundError(_FILE_RESOURCE, file_id) from None

        file_instance = (
            File.objects
            .select_related('user', 'folder__parent')
            .filter(pk=pk)
            .first()
        )
        if file_instance is None:
            raise ResourceNotFoundError(_FILE_RESOURCE, file_id)
        return file_instance

    def _get_readable_file(self, principal: Principal, file_id: object) -> File:
        file_instance = self._fetch_file(file_id)
        if not can_read(principal, file_instance):
            logger.debug('Read denied for file %s', file_id)
            raise ResourceNotFoundError(_FILE_RESOURCE, file_id)
        return file_instance

    def _get_mutable_file(self, principal: Principal, file_id: object) -> File:
        file_instance = self._fetch_file(file_id)
        if not can_mutate(principal, file_instance):
            logger.debug('Mutation denied for file %s', file_id)
            raise ResourceNotFoundError(_FILE_RESOURCE, file_id)
        return file_instance


def get_lifecycle_manager() -> FileLifecycleManager:
    """Build a manager backed by the configured default storage.

    Returns:
        FileLifecycleManager using ``STORAGES['default']``.
    """
    return FileLifecycleManager(storage=default_storage)  # type: ignore[arg-type]
