"""Shared fixtures for files app tests."""

import itertools

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from moto import mock_aws

from server.apps.files.logic.file_operations import get_lifecycle_manager
from server.apps.files.models import File, Folder

User = get_user_model()

BUCKET_NAME = 'file-hosting'


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def mock_s3():
    """Mock S3 service with the file-hosting bucket.

    Yields:
        boto3 S3 resource with the bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=BUCKET_NAME)
        yield conn


@pytest.fixture
def bucket(mock_s3):
    """Return the mocked bucket."""
    return mock_s3.Bucket(BUCKET_NAME)


@pytest.fixture
def manager(mock_s3):
    """Lifecycle manager wired to the default storage."""
    return get_lifecycle_manager()


@pytest.fixture
def sample_file_content():
    """Sample file content for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'test file content', name='test.txt')


@pytest.fixture
def folder(user):
    """Folder owned by ``user``."""
    return Folder.objects.create(user=user, name='Documents')


@pytest.fixture
def other_folder(other_user):
    """Folder owned by ``other_user``."""
    return Folder.objects.create(user=other_user, name='Private')


@pytest.fixture
def make_file(user):
    """Factory for File records without a stored blob.

    Returns:
        Callable creating File instances, owned by ``user`` by default.
    """
    counter = itertools.count(1)

    def factory(owner=None, *, is_public=False, folder=None, name='test.txt'):
        number = next(counter)
        return File.objects.create(
            user=owner or user,
            folder=folder,
            blob=f'uploads/{number}-{name}',
            filename=f'{number}-{name}',
            original_name=name,
            mime_type='text/plain',
            size_bytes=17,
            is_public=is_public,
        )

    return factory
