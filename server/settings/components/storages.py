"""Django storage configuration for S3-compatible backends.

This module configures django-storages for uploaded file blobs:
- MinIO for local development
- Any S3-compatible service (AWS S3, Cloudflare R2) for production

Credentials fall back to the boto3 credential chain when not set.
"""

from typing import Any, Final

from server.settings.components import config

# Storage configuration dictionary
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'server.apps.files.infrastructure.storage.FileStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AWS_STORAGE_BUCKET_NAME',
                default='file-hosting',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default=None),
            'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            'file_overwrite': False,  # Blob names must stay unique
            'default_acl': None,  # Inherit bucket ACL
        },
    },
}
