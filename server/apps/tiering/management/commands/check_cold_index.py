"""Management command to compare the cold-tier index with the bucket."""

import logging
from typing import Any

from django.core.management.base import BaseCommand

from server.apps.tiering.infrastructure.adapters import build_cold_adapter
from server.apps.tiering.logic.index_operations import (
    find_index_drift,
    heal_index_drift,
)

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Report drift between the metadata index and the cold bucket."""

    help = 'Compare the cold-tier metadata index with the cold bucket'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--heal',
            action='store_true',
            help='Rewrite index entries to match the bucket (objects are never touched)',
        )
        parser.add_argument(
            '--account',
            default=None,
            help='Only check the files of this account id',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the check.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        cold = build_cold_adapter()
        drift = find_index_drift(cold, options['account'])

        for account_id, file_name in drift.missing:
            self.stdout.write(f'Missing index entry: {account_id}/{file_name}')
        for account_id, file_name in drift.orphaned:
            self.stdout.write(f'Orphaned index entry: {account_id}/{file_name}')

        if drift.is_consistent:
            self.stdout.write(self.style.SUCCESS('Cold index is consistent'))
            return

        if not options['heal']:
            self.stdout.write(
                self.style.WARNING(
                    f'Found {len(drift.missing)} missing and '
                    f'{len(drift.orphaned)} orphaned entries '
                    '(run with --heal to fix the index)',
                ),
            )
            return

        changed = heal_index_drift(cold, drift)
        logger.info('Cold index healed: %d entries changed', changed)
        self.stdout.write(
            self.style.SUCCESS(f'Healed {changed} index entries'),
        )
