"""Exceptions for files app.

Authorization failures are reported as ``ResourceNotFoundError`` so that
callers cannot tell a private file from a missing one.
"""


class FilesError(Exception):
    """Base class for file lifecycle errors."""


class ResourceNotFoundError(FilesError):
    """Raised when a file is missing or the principal may not touch it."""

    def __init__(self, resource: str, identifier: object) -> None:
        """Initialize ResourceNotFoundError.

        Args:
            resource: Kind of resource, e.g. 'File'.
            identifier: Identifier that was looked up.
        """
        self.resource = resource
        self.identifier = identifier
        super().__init__(f'{resource} not found: {identifier}')


class ValidationFailedError(FilesError):
    """Raised when upload or folder assignment input is rejected."""


class StoreFailureError(FilesError):
    """Raised when blob storage or the metadata store fails."""


class AuthenticationRequiredError(FilesError):
    """Raised when an anonymous principal calls an owner-only operation."""
