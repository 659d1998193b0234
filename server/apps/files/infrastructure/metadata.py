"""Metadata extraction and validation for uploaded files."""

import mimetypes
import secrets
import time
from pathlib import Path
from typing import BinaryIO, Final

from django.conf import settings
from django.core.files.base import File as DjangoFile

from server.apps.files.exceptions import ValidationFailedError

_RANDOM_SUFFIX_UPPER: Final = 10**9

# Extension -> MIME types accepted for it
ALLOWED_TYPES: Final[dict[str, frozenset[str]]] = {
    'jpeg': frozenset(('image/jpeg',)),
    'jpg': frozenset(('image/jpeg',)),
    'png': frozenset(('image/png',)),
    'gif': frozenset(('image/gif',)),
    'pdf': frozenset(('application/pdf',)),
    'doc': frozenset(('application/msword',)),
    'docx': frozenset((
        'application/vnd.openxmlformats-officedocument'
        '.wordprocessingml.document',
    )),
    'txt': frozenset(('text/plain',)),
    'zip': frozenset(('application/zip', 'application/x-zip-compressed')),
    'mp4': frozenset(('video/mp4',)),
    'mov': frozenset(('video/quicktime',)),
    'avi': frozenset(('video/x-msvideo', 'video/avi')),
    'mp3': frozenset(('audio/mpeg', 'audio/mp3')),
    'wav': frozenset(('audio/wav', 'audio/x-wav', 'audio/wave')),
}


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from filename.

    Uses Python's built-in mimetypes module to guess MIME type
    from filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return 'application/octet-stream'
    return mime_type


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.pdf').

    Returns:
        Extension without dot, lowercase (e.g., 'pdf').
        Returns empty string if no extension.
    """
    extension = Path(filename).suffix
    return extension.lstrip('.').lower()


def get_file_size(file_obj: BinaryIO | DjangoFile) -> int:
    """Get file size from file object.

    Args:
        file_obj: File-like object.

    Returns:
        File size in bytes.
    """
    if hasattr(file_obj, 'size'):
        return file_obj.size
    file_size = len(file_obj.read())
    file_obj.seek(0)
    return file_size


def validate_upload(original_name: str, mime_type: str, size_bytes: int) -> None:
    """Check an upload against the size limit and the type allowlist.

    Both the extension and the MIME type must be allowed, and the MIME
    type must be one accepted for that extension.

    Args:
        original_name: Name supplied by the uploader.
        mime_type: Declared or detected MIME type.
        size_bytes: Upload size in bytes.

    Raises:
        ValidationFailedError: If the upload is rejected.
    """
    max_bytes = settings.FILES_MAX_UPLOAD_BYTES
    if size_bytes > max_bytes:
        raise ValidationFailedError(
            f'File is too large: {size_bytes} bytes '
            f'(limit: {max_bytes} bytes)',
        )

    accepted = ALLOWED_TYPES.get(get_file_extension(original_name))
    if accepted is None or mime_type.lower() not in accepted:
        raise ValidationFailedError('Only specific file types are allowed!')


def generate_blob_name(original_name: str) -> str:
    """Build the suggested storage location for a new upload.

    Args:
        original_name: Name supplied by the uploader.

    Returns:
        Location like 'uploads/1700000000000-123456789-report.pdf'.
    """
    millis = time.time_ns() // 1_000_000
    suffix = secrets.randbelow(_RANDOM_SUFFIX_UPPER)
    basename = Path(original_name).name
    return f'{settings.FILES_UPLOAD_PREFIX}/{millis}-{suffix}-{basename}'


def extract_filename(storage_path: str) -> str:
    """Extract filename from storage path.

    Args:
        storage_path: Full path (e.g., 'uploads/1-2-file.pdf').

    Returns:
        Filename (e.g., '1-2-file.pdf').
    """
    return Path(storage_path).name
