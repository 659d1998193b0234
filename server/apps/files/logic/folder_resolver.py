"""Folder lookups scoped to an owner.

Upload and reassignment treat an unknown folder differently:
``resolve_or_clear`` quietly files the upload nowhere, while
``resolve_or_fail`` reports the problem to the caller.
"""

import logging

from django.db.models import QuerySet

from server.apps.files.exceptions import ValidationFailedError
from server.apps.files.models import Folder

logger = logging.getLogger(__name__)

# Folder references arrive from forms as strings or ints
FolderRef = int | str | None


def _parse_folder_id(requested_folder_id: FolderRef) -> int | None:
    """Normalize a folder reference.

    Returns:
        Integer id, or None for an empty reference.

    Raises:
        ValidationFailedError: If the reference is not an integer.
    """
    if requested_folder_id is None:
        return None
    # bool is an int subclass but never a folder id
    if isinstance(requested_folder_id, int) and not isinstance(
        requested_folder_id,
        bool,
    ):
        return requested_folder_id
    if isinstance(requested_folder_id, str):
        reference = requested_folder_id.strip()
        if not reference:
            return None
        if reference.isascii() and reference.isdigit():
            return int(reference)
    raise ValidationFailedError('Invalid folder id')


def _find_owned_folder_id(owner_id: int, folder_id: int) -> int | None:
    return (
        Folder.objects
        .filter(id=folder_id, user_id=owner_id)
        .values_list('id', flat=True)
        .first()
    )


def resolve_or_clear(owner_id: int, requested_folder_id: FolderRef) -> int | None:
    """Resolve a folder for a new upload.

    Any reference that does not point at one of the owner's folders,
    malformed ones included, falls back to no folder.

    Args:
        owner_id: Owner of the file being uploaded.
        requested_folder_id: Folder reference from the request.

    Returns:
        Folder id, or None when the file stays unfiled.
    """
    try:
        folder_id = _parse_folder_id(requested_folder_id)
    except ValidationFailedError:
        logger.info(
            'Ignoring malformed folder id on upload: %r',
            requested_folder_id,
        )
        return None

    if folder_id is None:
        return None

    resolved = _find_owned_folder_id(owner_id, folder_id)
    if resolved is None:
        logger.info(
            'Folder %d not owned by user %d, uploading unfiled',
            folder_id,
            owner_id,
        )
    return resolved


def resolve_or_fail(owner_id: int, requested_folder_id: FolderRef) -> int | None:
    """Resolve a folder for an explicit reassignment.

    Args:
        owner_id: Owner of the file being moved.
        requested_folder_id: Folder reference, empty to unfile.

    Returns:
        Folder id, or None to unfile.

    Raises:
        ValidationFailedError: If the reference is malformed or does not
            point at one of the owner's folders.
    """
    folder_id = _parse_folder_id(requested_folder_id)
    if folder_id is None:
        return None

    resolved = _find_owned_folder_id(owner_id, folder_id)
    if resolved is None:
        raise ValidationFailedError('Selected folder not found')
    return resolved


def list_owner_folders(owner_id: int) -> QuerySet[Folder]:
    """List an owner's folders by name."""
    return Folder.objects.filter(user_id=owner_id).order_by('name')
