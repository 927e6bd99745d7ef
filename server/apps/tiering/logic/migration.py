"""Migration engine: moves files between the hot and cold tier.

Archive (hot -> cold):
    1. Fetch source bytes (the hot object, directly or by its URL)
    2. Stage them in a local file
    3. Upload to the cold bucket at ``{account_id}/{file_name}``
    4. Write the metadata index entry (commit point)
    5. Delete the hot object (best effort, failure only logged)
    6. Release the staging file (always, failure only logged)

Retrieve (cold -> hot), per file and sequentially:
    fetch from cold, upload to hot, delete cold, delete index entry.

A file exists in at most one tier once a transfer has fully completed.
Archive is safe to retry because its destination key is deterministic.
There is no locking: concurrent transfers of the same file may leave a
duplicate or orphaned copy that ``check_cold_index`` can report.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import IO

from server.apps.accounts.logic.authorization import (
    AuthContext,
    require_tier_access,
)
from server.apps.tiering.infrastructure.adapters import (
    ColdStorageAdapter,
    HotStorageAdapter,
    StoredObject,
    build_cold_adapter,
    build_hot_adapter,
)
from server.apps.tiering.infrastructure.fetch import SourceFetcher
from server.apps.tiering.infrastructure.metadata import validate_file_name
from server.apps.tiering.infrastructure.staging import staged_file
from server.apps.tiering.logic.index_operations import (
    record_cold_location,
    remove_cold_location,
)
from server.common.errors import (
    CallError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UpstreamFetchError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetrievalFailure:
    """A file that could not be retrieved, with the reason."""

    name: str
    error: CallError

    def as_dict(self) -> dict[str, str]:
        """Serialize for the call surface."""
        return {
            'name': self.name,
            'status': self.error.status,
            'message': self.error.message,
        }


@dataclass(slots=True)
class RetrievalResult:
    """Per-file outcome of a batch retrieve."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[RetrievalFailure] = field(default_factory=list)

    @property
    def message(self) -> str:
        """Aggregate message for the caller."""
        message = f'Successfully received {len(self.succeeded)} files.'
        if self.failed:
            message = f'{message} {len(self.failed)} files failed to download.'
        return message


class MigrationEngine:
    """Orchestrates archive and retrieve transfers for one call.

    Holds no state between calls besides the injected adapters.
    """

    def __init__(
        self,
        hot: HotStorageAdapter,
        cold: ColdStorageAdapter,
        fetcher: SourceFetcher | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            hot: Hot tier adapter.
            cold: Cold tier adapter.
            fetcher: Fetcher for URL sources, a default one if None.
        """
        self.hot = hot
        self.cold = cold
        self.fetcher = fetcher or SourceFetcher()

    def list_cold_files(self, context: AuthContext | None) -> list[StoredObject]:
        """List the caller's files in the cold tier.

        Reads the bucket directly, not the metadata index.

        Args:
            context: Caller context, must carry the tier access claim.

        Returns:
            Cold objects under the caller's prefix.

        Raises:
            InternalError: If the bucket cannot be listed.
        """
        context = require_tier_access(context)
        try:
            return self.cold.list_objects(context.account_id)
        except Exception as error:
            logger.exception(
                'Error listing cold files for %s',
                context.account_id,
            )
            raise InternalError('Failed to list cold storage files.') from error

    def archive(
        self,
        context: AuthContext | None,
        file_name: str,
        file_url: str | None = None,
    ) -> str:
        """Move one of the caller's hot files to the cold tier.

        Args:
            context: Caller context, must carry the tier access claim.
            file_name: Name of the hot file.
            file_url: URL of the caller's own hot object to fetch the bytes
                from; the hot object is read directly when None.

        Returns:
            Message for the caller.

        Raises:
            InvalidArgumentError: If the file name is invalid or ``file_url``
                does not address the caller's hot object.
            NotFoundError: If the caller has no hot file with this name.
            UpstreamFetchError: If the source cannot be fetched.
            InternalError: If the cold upload or the index write fails.
        """
        context = require_tier_access(context)
        account_id = context.account_id
        validate_file_name(file_name)

        if not self._hot_exists(account_id, file_name):
            raise NotFoundError(f'File {file_name} not found in hot storage.')
        if file_url and not self._is_hot_source(account_id, file_name, file_url):
            logger.warning(
                'Rejected archive source for %s/%s: %s',
                account_id,
                file_name,
                file_url,
            )
            raise InvalidArgumentError(
                'File URL does not reference the file in hot storage.',
            )

        logger.info('Archiving %s/%s', account_id, file_name)
        with staged_file(prefix='archive-') as staging:
            content_type = self._stage_archive_source(
                account_id,
                file_name,
                file_url,
                staging,
            )
            cold_url = self._upload_to_cold(
                account_id,
                file_name,
                staging,
                content_type,
            )
            self._commit_index(account_id, file_name, cold_url)
            self._release_hot_copy(account_id, file_name)

        logger.info('File %s archived successfully.', file_name)
        return 'File uploaded successfully.'

    def retrieve(
        self,
        context: AuthContext | None,
        file_names: Iterable[str],
    ) -> RetrievalResult:
        """Move several of the caller's cold files back to the hot tier.

        Files are processed one after another. A failure on one file is
        recorded and does not stop the remaining files.

        Args:
            context: Caller context, must carry the tier access claim.
            file_names: Names of the cold files.

        Returns:
            RetrievalResult with succeeded and failed names.
        """
        context = require_tier_access(context)
        result = RetrievalResult()

        for file_name in file_names:
            try:
                self._retrieve_one(context.account_id, file_name)
            except CallError as error:
                logger.warning('Error receiving file %s: %s', file_name, error)
                result.failed.append(RetrievalFailure(file_name, error))
            else:
                result.succeeded.append(file_name)

        logger.info(
            'Retrieve for %s: %d succeeded, %d failed',
            context.account_id,
            len(result.succeeded),
            len(result.failed),
        )
        return result

    def retrieve_file(self, context: AuthContext | None, file_name: str) -> str:
        """Move one of the caller's cold files back to the hot tier.

        Args:
            context: Caller context, must carry the tier access claim.
            file_name: Name of the cold file.

        Returns:
            Message for the caller.

        Raises:
            InvalidArgumentError: If the file name is invalid.
            NotFoundError: If the caller has no cold file with this name.
            InternalError: If any transfer step fails.
        """
        context = require_tier_access(context)
        self._retrieve_one(context.account_id, file_name)
        return f'File {file_name} successfully received and stored.'

    def _hot_exists(self, account_id: str, file_name: str) -> bool:
        try:
            return self.hot.exists(account_id, file_name)
        except Exception as error:
            logger.exception('Failed to look up hot file %s', file_name)
            raise InternalError('Failed to look up file in hot storage.') from error

    def _is_hot_source(self, account_id: str, file_name: str, file_url: str) -> bool:
        try:
            return self.hot.is_object_url(account_id, file_name, file_url)
        except Exception as error:
            logger.exception('Failed to build hot URL for %s', file_name)
            raise InternalError('Failed to look up file in hot storage.') from error

    def _stage_archive_source(
        self,
        account_id: str,
        file_name: str,
        file_url: str | None,
        staging: IO[bytes],
    ) -> str:
        if file_url:
            fetched = self.fetcher.fetch(file_url, staging)
            return fetched.content_type

        try:
            size_bytes = self.hot.copy_to(account_id, file_name, staging)
            content_type = self.hot.content_type(account_id, file_name)
        except Exception as error:
            logger.exception('Failed to read hot file %s', file_name)
            raise UpstreamFetchError('Failed to fetch file.') from error
        logger.info('Staged %d bytes of %s', size_bytes, file_name)
        return content_type

    def _upload_to_cold(
        self,
        account_id: str,
        file_name: str,
        staging: IO[bytes],
        content_type: str,
    ) -> str:
        try:
            self.cold.put(account_id, file_name, staging, content_type)
            return self.cold.url(account_id, file_name)
        except Exception as error:
            # Hot copy is untouched, nothing archived
            logger.exception('Error uploading file %s to cold storage', file_name)
            raise InternalError('File upload failed.') from error

    def _commit_index(self, account_id: str, file_name: str, cold_url: str) -> None:
        try:
            record_cold_location(account_id, file_name, cold_url)
        except Exception as error:
            # Object now exists in both tiers without an index entry
            logger.exception(
                'Index write failed, %s/%s exists in both tiers unindexed',
                account_id,
                file_name,
            )
            raise InternalError('File upload failed.') from error

    def _release_hot_copy(self, account_id: str, file_name: str) -> None:
        try:
            self.hot.delete(account_id, file_name)
        except Exception:
            # Archived already, the duplicate hot copy is reconcilable
            logger.exception(
                'Failed to delete hot copy after archive (duplicate): %s/%s',
                account_id,
                file_name,
            )

    def _retrieve_one(self, account_id: str, file_name: str) -> None:
        validate_file_name(file_name)

        try:
            exists = self.cold.exists(account_id, file_name)
        except Exception as error:
            logger.exception('Failed to look up cold file %s', file_name)
            raise InternalError('Failed to receive file from cold storage.') from error
        if not exists:
            raise NotFoundError(f'File {file_name} not found in cold storage.')

        with staged_file(prefix='retrieve-') as staging:
            try:
                self.cold.copy_to(account_id, file_name, staging)
                content_type = self.cold.content_type(account_id, file_name)
            except Exception as error:
                logger.exception('Failed to download %s from cold storage', file_name)
                raise InternalError(
                    'Failed to receive file from cold storage.',
                ) from error
            logger.info('File %s downloaded from cold storage.', file_name)

            try:
                self.hot.put(account_id, file_name, staging, content_type)
            except Exception as error:
                logger.exception('Failed to upload %s to hot storage', file_name)
                raise InternalError(
                    'Failed to receive file from cold storage.',
                ) from error
            logger.info('File %s uploaded to hot storage.', file_name)

        try:
            self.cold.delete(account_id, file_name)
        except Exception as error:
            logger.exception(
                'Failed to delete %s from cold storage (duplicate)',
                file_name,
            )
            raise InternalError(
                'File was stored but could not be removed from cold storage.',
            ) from error
        logger.info('File %s deleted from cold storage.', file_name)

        try:
            remove_cold_location(account_id, file_name)
        except Exception as error:
            logger.exception('Failed to delete index entry for %s (orphaned)', file_name)
            raise InternalError(
                'File was moved but its index entry could not be removed.',
            ) from error


def build_migration_engine(fetcher: SourceFetcher | None = None) -> MigrationEngine:
    """Build an engine over the configured ``hot`` and ``cold`` storages.

    Args:
        fetcher: Optional fetcher for URL sources.

    Returns:
        New MigrationEngine.
    """
    return MigrationEngine(
        hot=build_hot_adapter(),
        cold=build_cold_adapter(),
        fetcher=fetcher,
    )
