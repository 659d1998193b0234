"""Visibility and ownership rules for files.

Pure predicates over already-fetched records. Callers turn a ``False``
into ``ResourceNotFoundError`` so private files stay concealed.
"""

from django.contrib.auth.base_user import AbstractBaseUser
from django.contrib.auth.models import AnonymousUser

from server.apps.files.models import File

# Authenticated user, anonymous user, or no user at all
Principal = AbstractBaseUser | AnonymousUser | None


def is_authenticated(principal: Principal) -> bool:
    """Tell whether the principal is a logged-in user."""
    return principal is not None and bool(principal.is_authenticated)


def is_owner(principal: Principal, file_instance: File) -> bool:
    """Tell whether the principal owns the file."""
    return (
        is_authenticated(principal)
        and principal.pk == file_instance.user_id  # type: ignore[union-attr]
    )


def can_read(principal: Principal, file_instance: File) -> bool:
    """Check read access.

    Public files are readable by anyone, private ones only by the owner.

    Args:
        principal: Requesting user, anonymous user or None.
        file_instance: File being accessed.

    Returns:
        True if the principal may view or download the file.
    """
    return file_instance.is_public or is_owner(principal, file_instance)


def can_mutate(principal: Principal, file_instance: File) -> bool:
    """Check delete, reassign and edit rights.

    Visibility never grants mutation, only ownership does.

    Args:
        principal: Requesting user, anonymous user or None.
        file_instance: File being changed.

    Returns:
        True if the principal may change the file.
    """
    return is_owner(principal, file_instance)
