"""Business logic for the cold-tier metadata index.

The index is a cache over the cold bucket. Listings never read it, so
drift between the two only affects the index itself and can be detected
and healed with :func:`find_index_drift` and :func:`heal_index_drift`.
"""

import logging
from dataclasses import dataclass, field

from django.db import transaction
from django.db.models import QuerySet

from server.apps.tiering.infrastructure.adapters import ColdStorageAdapter
from server.apps.tiering.models import ColdFileRecord

logger = logging.getLogger(__name__)

# (account_id, file_name)
FileKey = tuple[str, str]


def record_cold_location(
    account_id: str,
    file_name: str,
    url: str,
) -> ColdFileRecord:
    """Write or overwrite the index entry for a cold file.

    Args:
        account_id: Owner account id.
        file_name: File name.
        url: Location of the object in the cold bucket.

    Returns:
        Stored ColdFileRecord.
    """
    with transaction.atomic():
        record, created = ColdFileRecord.objects.update_or_create(
            account_id=account_id,
            file_name=file_name,
            defaults={'url': url},
        )
    logger.info(
        'Index entry %s: %s/%s',
        'created' if created else 'updated',
        account_id,
        file_name,
    )
    return record


def remove_cold_location(account_id: str, file_name: str) -> bool:
    """Delete the index entry for a file.

    Args:
        account_id: Owner account id.
        file_name: File name.

    Returns:
        True if an entry was deleted, False if none existed.
    """
    deleted, _ = ColdFileRecord.objects.filter(
        account_id=account_id,
        file_name=file_name,
    ).delete()
    if deleted:
        logger.info('Index entry deleted: %s/%s', account_id, file_name)
    else:
        logger.warning('No index entry to delete: %s/%s', account_id, file_name)
    return deleted > 0


def list_index_entries(account_id: str | None = None) -> QuerySet[ColdFileRecord]:
    """List index entries, optionally for one account.

    Args:
        account_id: Owner account id, or None for all accounts.

    Returns:
        QuerySet of ColdFileRecord.
    """
    queryset = ColdFileRecord.objects.all()
    if account_id is not None:
        queryset = queryset.filter(account_id=account_id)
    return queryset


@dataclass(slots=True)
class IndexDrift:
    """Differences between the metadata index and the cold bucket."""

    # Objects in the bucket without an index entry
    missing: list[FileKey] = field(default_factory=list)
    # Index entries without an object in the bucket
    orphaned: list[FileKey] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        """Whether index and bucket agree."""
        return not self.missing and not self.orphaned


def find_index_drift(
    cold: ColdStorageAdapter,
    account_id: str | None = None,
) -> IndexDrift:
    """Compare the metadata index against the cold bucket.

    Args:
        cold: Cold tier adapter.
        account_id: Limit the comparison to one account, all accounts
            if None.

    Returns:
        IndexDrift listing missing and orphaned entries, sorted.
    """
    if account_id is None:
        account_ids = cold.list_account_ids()
    else:
        account_ids = [account_id]

    stored: set[FileKey] = set()
    for owner_id in account_ids:
        for stored_object in cold.list_objects(owner_id):
            stored.add((owner_id, stored_object.name))

    indexed: set[FileKey] = set(
        list_index_entries(account_id).values_list('account_id', 'file_name'),
    )

    drift = IndexDrift(
        missing=sorted(stored - indexed),
        orphaned=sorted(indexed - stored),
    )
    logger.info(
        'Index drift: %d missing, %d orphaned',
        len(drift.missing),
        len(drift.orphaned),
    )
    return drift


def heal_index_drift(cold: ColdStorageAdapter, drift: IndexDrift) -> int:
    """Rewrite the index so it matches the cold bucket.

    Only index entries are changed; objects are never touched.

    Args:
        cold: Cold tier adapter.
        drift: Drift found by :func:`find_index_drift`.

    Returns:
        Number of index entries created or deleted.
    """
    changed = 0
    for account_id, file_name in drift.missing:
        record_cold_location(account_id, file_name, cold.url(account_id, file_name))
        changed += 1
    for account_id, file_name in drift.orphaned:
        if remove_cold_location(account_id, file_name):
            changed += 1
    logger.info('Healed %d index entries', changed)
    return changed
