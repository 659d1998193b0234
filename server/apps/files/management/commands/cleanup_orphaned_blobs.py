"""Management command to remove blobs that no file record points at."""

import logging
from datetime import timedelta
from typing import Any, Final

from django.conf import settings
from django.core.files.storage import default_storage
from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.files.models import File

_DEFAULT_MIN_AGE_MINUTES: Final = 60
_DEFAULT_BATCH_SIZE: Final = 1000

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Delete blobs left behind by failed deletes or rollbacks."""

    help = 'Remove uploaded blobs that have no file record'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max blobs to process (default: {_DEFAULT_BATCH_SIZE})',
        )
        parser.add_argument(
            '--min-age-minutes',
            type=int,
            default=_DEFAULT_MIN_AGE_MINUTES,
            help=(
                'Skip blobs younger than this, their upload may still be '
                f'in progress (default: {_DEFAULT_MIN_AGE_MINUTES})'
            ),
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']
        cutoff = timezone.now() - timedelta(
            minutes=options['min_age_minutes'],
        )

        orphans = self._find_orphans(cutoff)[:batch_size]
        self.stdout.write(f'Found {len(orphans)} orphaned blobs')

        count = 0
        failed = 0

        for location in orphans:
            if dry_run:
                self.stdout.write(f'Would delete: {location}')
                count += 1
                continue

            try:
                default_storage.delete(location)
                count += 1
                logger.info('Removed orphaned blob: %s', location)
            except Exception as exc:
                self.stderr.write(f'Failed to delete {location}: {exc}')
                logger.exception('Failed to remove orphaned blob: %s', location)
                failed += 1

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would remove {count} orphaned blobs'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Removed {count} orphaned blobs, {failed} failed',
                ),
            )

    def _find_orphans(self, cutoff: Any) -> list[str]:
        prefix = settings.FILES_UPLOAD_PREFIX
        _, blob_names = default_storage.listdir(prefix)
        known = set(File.objects.values_list('blob', flat=True))

        orphans = []
        for blob_name in sorted(blob_names):
            location = f'{prefix}/{blob_name}'
            if location in known:
                continue
            if default_storage.get_modified_time(location) > cutoff:
                continue
            orphans.append(location)
        return orphans
