"""Business logic layer for files app.

This package contains all business logic for the file lifecycle:
- Visibility and ownership rules (access_policy)
- Owner-scoped folder resolution (folder_resolver)
- Upload, detail, download, delete and folder reassignment
  (file_operations)

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
