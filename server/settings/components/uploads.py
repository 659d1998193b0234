"""Upload limits for user files."""

from typing import Final

from server.settings.components import config

# 10 MB per uploaded file
FILES_MAX_UPLOAD_BYTES: Final = config(
    'FILES_MAX_UPLOAD_BYTES',
    cast=int,
    default=10 * 1024 * 1024,
)

# Storage prefix all uploaded blobs are written under
FILES_UPLOAD_PREFIX: Final = config('FILES_UPLOAD_PREFIX', default='uploads')
