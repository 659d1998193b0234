"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Blob storage backend (S3/MinIO/R2)
- Upload metadata (MIME type, size, type allowlist, blob naming)

Keep infrastructure concerns separate from business logic.
"""
