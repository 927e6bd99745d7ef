"""Tests for check_cold_index management command."""

from io import StringIO

import pytest
from django.core.management import call_command

from server.apps.tiering.logic.index_operations import (
    list_index_entries,
    record_cold_location,
)


def _is_indexed(account_id, file_name):
    return list_index_entries(account_id).filter(file_name=file_name).exists()


@pytest.mark.django_db
class TestCheckColdIndexCommand:
    """Tests for check_cold_index management command."""

    def test_consistent(self, cold, put_object):
        """Test a matching index is reported as consistent."""
        put_object('cold-archive', 'acc1/a.txt', b'a')
        record_cold_location('acc1', 'a.txt', cold.url('acc1', 'a.txt'))

        out = StringIO()
        call_command('check_cold_index', stdout=out)

        assert 'Cold index is consistent' in out.getvalue()

    def test_report_only_by_default(self, cold, put_object):
        """Test drift is reported without changing the index."""
        put_object('cold-archive', 'acc1/unindexed.txt', b'a')
        record_cold_location('acc2', 'gone.txt', 'https://cold/acc2/gone.txt')

        out = StringIO()
        call_command('check_cold_index', stdout=out)

        output = out.getvalue()
        assert 'Missing index entry: acc1/unindexed.txt' in output
        assert 'Orphaned index entry: acc2/gone.txt' in output
        assert 'Found 1 missing and 1 orphaned entries' in output
        assert _is_indexed('acc2', 'gone.txt')
        assert not _is_indexed('acc1', 'unindexed.txt')

    def test_heal(self, cold, put_object, object_exists):
        """Test --heal rewrites the index and keeps the objects."""
        put_object('cold-archive', 'acc1/unindexed.txt', b'a')
        record_cold_location('acc2', 'gone.txt', 'https://cold/acc2/gone.txt')

        out = StringIO()
        call_command('check_cold_index', '--heal', stdout=out)

        assert 'Healed 2 index entries' in out.getvalue()
        assert _is_indexed('acc1', 'unindexed.txt')
        assert not _is_indexed('acc2', 'gone.txt')
        assert object_exists('cold-archive', 'acc1/unindexed.txt')

    def test_account_option(self, cold, put_object):
        """Test --account limits the check and the heal to one account."""
        put_object('cold-archive', 'acc1/unindexed.txt', b'a')
        record_cold_location('acc2', 'gone.txt', 'https://cold/acc2/gone.txt')

        out = StringIO()
        call_command('check_cold_index', '--account', 'acc2', '--heal', stdout=out)

        output = out.getvalue()
        assert 'Orphaned index entry: acc2/gone.txt' in output
        assert 'acc1/unindexed.txt' not in output
        assert 'Healed 1 index entries' in output
        assert not _is_indexed('acc2', 'gone.txt')
        assert not _is_indexed('acc1', 'unindexed.txt')
