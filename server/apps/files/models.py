"""Database models for files app."""

from typing import ClassVar, Final, final

from typing_extensions import override

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_MIME_TYPE_MAX_LENGTH: Final = 255
_BLOB_LOCATION_MAX_LENGTH: Final = 512


@final
class Folder(models.Model):
    """User-owned folder for organizing files.

    Folders are scoped to a single owner. A folder may point at a parent
    folder, only one level of which is looked up for display.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='folders',
        db_index=True,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        related_name='children',
        null=True,
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Folder'  # type: ignore[mutable-override]
        verbose_name_plural = 'Folders'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['name']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['user', 'name'],
                name='folders_user_name_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user_id}:{self.name}'


@final
class File(models.Model):
    """Uploaded file owned by a single user.

    The bytes live in blob storage under ``blob.name``; this record holds
    everything else. ``folder``, when set, must belong to the same owner.
    Public files are readable by anyone, private files only by the owner.
    """

    # Owner relationship
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    folder = models.ForeignKey(
        Folder,
        on_delete=models.SET_NULL,
        related_name='files',
        null=True,
        blank=True,
    )

    # Blob location in storage, e.g. 'uploads/1700000000000-42-report.pdf'
    blob = models.FileField(
        upload_to='',
        max_length=_BLOB_LOCATION_MAX_LENGTH,
        help_text='Blob location in storage',
    )

    filename = models.CharField(
        max_length=_BLOB_LOCATION_MAX_LENGTH,
        unique=True,
        help_text='Stored filename, unique per storage',
    )

    original_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Name supplied by the uploader',
    )

    mime_type = models.CharField(max_length=_MIME_TYPE_MAX_LENGTH)

    size_bytes = models.BigIntegerField(help_text='File size in bytes')

    description = models.TextField(blank=True, default='')

    is_public = models.BooleanField(default=False, db_index=True)

    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-uploaded_at', '-id']

        indexes: ClassVar[list[models.Index]] = [
            # Owner listing, most recent first
            models.Index(
                fields=['user', '-uploaded_at'],
                name='files_user_recent_idx',
            ),
            # Public listing, most recent first
            models.Index(
                fields=['is_public', '-uploaded_at'],
                name='files_public_recent_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user_id}:{self.original_name}'

    @override
    def clean(self) -> None:
        """Reject folders owned by somebody else.

        Raises:
            ValidationError: If the folder owner differs from the file owner.
        """
        super().clean()
        if self.folder_id is not None and self.folder.user_id != self.user_id:
            raise ValidationError(
                {'folder': 'Folder must belong to the file owner'},
            )

    @property
    def location(self) -> str:
        """Blob location in storage."""
        return self.blob.name
