"""Storage tier adapters.

Each adapter wraps one configured storage backend and speaks in terms of
``(account_id, file_name)`` pairs mapped to ``{account_id}/{file_name}``
keys. Adapters are constructed explicitly and injected into the
operations that need them.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import IO, ClassVar, Final
from urllib.parse import unquote, urlsplit

from django.core.files.base import File as DjangoFile
from django.core.files.storage import storages

from server.apps.tiering.infrastructure.metadata import (
    DEFAULT_CONTENT_TYPE,
    account_prefix,
    build_object_key,
)
from server.apps.tiering.infrastructure.storage import TierStorage
from server.apps.tiering.models import Tier

logger = logging.getLogger(__name__)

_CHUNK_SIZE: Final = 64 * 1024


@dataclass(frozen=True, slots=True)
class StoredObject:
    """A file in one tier, as returned by listings."""

    name: str
    url: str

    def as_dict(self) -> dict[str, str]:
        """Serialize for the call surface."""
        return {'name': self.name, 'url': self.url}


class TierAdapter:
    """Per-account view over one storage bucket."""

    tier: ClassVar[Tier]

    def __init__(self, storage: TierStorage) -> None:
        """Initialize the adapter.

        Args:
            storage: Storage backend holding this tier's bucket.
        """
        self.storage = storage

    def key(self, account_id: str, file_name: str) -> str:
        """Storage key for a file of an account."""
        return build_object_key(account_id, file_name)

    def list_objects(self, account_id: str) -> list[StoredObject]:
        """List files stored under an account prefix.

        Args:
            account_id: Owner account id.

        Returns:
            Objects with names relative to the account prefix.
        """
        names = self.storage.list_prefix(account_prefix(account_id))
        logger.debug(
            'Listed %d %s objects for %s',
            len(names),
            self.tier,
            account_id,
        )
        return [
            StoredObject(name=name, url=self.url(account_id, name))
            for name in names
        ]

    def list_account_ids(self) -> list[str]:
        """List account ids that have at least one object in this tier."""
        return self.storage.list_top_level()

    def exists(self, account_id: str, file_name: str) -> bool:
        """Check whether a file exists in this tier."""
        return self.storage.exists(self.key(account_id, file_name))

    def url(self, account_id: str, file_name: str) -> str:
        """URL of a file in this tier."""
        return self.storage.url(self.key(account_id, file_name))

    def is_object_url(self, account_id: str, file_name: str, url: str) -> bool:
        """Check whether a URL addresses a file of this tier.

        Scheme, host and path must match the storage URL of the file;
        query strings such as presigned signatures are ignored.

        Args:
            account_id: Owner account id.
            file_name: File name.
            url: Candidate URL.

        Returns:
            True if ``url`` points at the stored object.
        """
        expected = urlsplit(self.url(account_id, file_name))
        candidate = urlsplit(url)
        return (
            candidate.scheme == expected.scheme
            and candidate.netloc == expected.netloc
            and unquote(candidate.path) == unquote(expected.path)
        )

    def content_type(self, account_id: str, file_name: str) -> str:
        """Stored content type of a file, octet-stream if unknown."""
        content_type = self.storage.content_type(self.key(account_id, file_name))
        return content_type or DEFAULT_CONTENT_TYPE

    def iter_chunks(self, account_id: str, file_name: str) -> Iterator[bytes]:
        """Stream the bytes of a file in chunks.

        Args:
            account_id: Owner account id.
            file_name: File name.

        Yields:
            Byte chunks of the file.
        """
        key = self.key(account_id, file_name)
        with self.storage.open(key, 'rb') as stored:
            yield from stored.chunks(_CHUNK_SIZE)

    def copy_to(
        self,
        account_id: str,
        file_name: str,
        destination: IO[bytes],
    ) -> int:
        """Copy the bytes of a file into a writable file.

        Returns:
            Number of bytes copied.
        """
        size_bytes = 0
        for chunk in self.iter_chunks(account_id, file_name):
            destination.write(chunk)
            size_bytes += len(chunk)
        destination.flush()
        return size_bytes

    def put(
        self,
        account_id: str,
        file_name: str,
        content: IO[bytes],
        content_type: str | None = None,
    ) -> str:
        """Write a file, overwriting any object at the same key.

        Args:
            account_id: Owner account id.
            file_name: File name.
            content: Readable binary file, read from its start.
            content_type: Content type to store with the object.

        Returns:
            Storage key written.
        """
        key = self.key(account_id, file_name)
        content.seek(0)
        upload = DjangoFile(content, name=file_name)
        upload.content_type = content_type or DEFAULT_CONTENT_TYPE
        return self.storage.save(key, upload)

    def delete(self, account_id: str, file_name: str) -> None:
        """Delete a file from this tier."""
        self.storage.delete(self.key(account_id, file_name))


class HotStorageAdapter(TierAdapter):
    """Adapter for the per-account hot tier."""

    tier = Tier.HOT


class ColdStorageAdapter(TierAdapter):
    """Adapter for the shared cold archive bucket."""

    tier = Tier.COLD


def build_hot_adapter() -> HotStorageAdapter:
    """Build the hot adapter from the ``hot`` storage alias."""
    return HotStorageAdapter(storages['hot'])  # type: ignore[arg-type]


def build_cold_adapter() -> ColdStorageAdapter:
    """Build the cold adapter from the ``cold`` storage alias."""
    return ColdStorageAdapter(storages['cold'])  # type: ignore[arg-type]
