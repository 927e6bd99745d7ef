"""Business logic for hot-tier file operations."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import IO

from server.apps.accounts.logic.authorization import (
    AuthContext,
    require_authenticated,
    require_owner,
)
from server.apps.tiering.infrastructure.adapters import (
    HotStorageAdapter,
    StoredObject,
)
from server.apps.tiering.infrastructure.metadata import (
    detect_mime_type,
    validate_file_name,
)
from server.common.errors import CallError, InternalError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DeletionResult:
    """Per-file outcome of a hot-tier delete."""

    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def list_files(
    context: AuthContext | None,
    hot: HotStorageAdapter,
    account_id: str | None = None,
) -> list[StoredObject]:
    """List files in an account's hot namespace.

    Reads the bucket directly.

    Args:
        context: Caller context.
        hot: Hot tier adapter.
        account_id: Namespace to list, the caller's own by default. Only
            the caller's own namespace may be listed.

    Returns:
        Hot objects with download URLs.

    Raises:
        PermissionDeniedError: If ``account_id`` is someone else's.
        InternalError: If the bucket cannot be listed.
    """
    context = require_authenticated(context)
    require_owner(context, account_id or context.account_id)
    try:
        return hot.list_objects(context.account_id)
    except Exception as error:
        logger.exception('Error fetching files for %s', context.account_id)
        raise InternalError('Failed to fetch files.') from error


def upload_file(
    context: AuthContext | None,
    hot: HotStorageAdapter,
    file_name: str,
    file_obj: IO[bytes],
    content_type: str | None = None,
) -> StoredObject:
    """Upload a file into the caller's hot namespace.

    An existing file with the same name is overwritten.

    Args:
        context: Caller context.
        hot: Hot tier adapter.
        file_name: Plain file name.
        file_obj: File-like object to upload.
        content_type: Content type, detected from the name if None.

    Returns:
        Stored object with its download URL.

    Raises:
        InvalidArgumentError: If the file name is invalid.
        InternalError: If the upload fails.
    """
    context = require_authenticated(context)
    validate_file_name(file_name)
    mime_type = content_type or detect_mime_type(file_name)

    logger.info('Uploading %s/%s (%s)', context.account_id, file_name, mime_type)
    try:
        hot.put(context.account_id, file_name, file_obj, mime_type)
        url = hot.url(context.account_id, file_name)
    except Exception as error:
        logger.exception('Failed to upload file: %s', file_name)
        raise InternalError('File upload failed.') from error

    return StoredObject(name=file_name, url=url)


def delete_files(
    context: AuthContext | None,
    hot: HotStorageAdapter,
    file_names: Iterable[str],
) -> DeletionResult:
    """Delete files from the caller's hot namespace.

    Each file is handled independently; failures are reported per file.

    Args:
        context: Caller context.
        hot: Hot tier adapter.
        file_names: Names of the files to delete.

    Returns:
        DeletionResult with deleted and failed names.
    """
    context = require_authenticated(context)
    result = DeletionResult()

    for file_name in file_names:
        try:
            _delete_one(hot, context.account_id, file_name)
        except CallError:
            logger.warning('Failed to delete hot file: %s', file_name)
            result.failed.append(file_name)
        else:
            result.deleted.append(file_name)

    return result


def _delete_one(hot: HotStorageAdapter, account_id: str, file_name: str) -> None:
    validate_file_name(file_name)
    try:
        exists = hot.exists(account_id, file_name)
        if exists:
            hot.delete(account_id, file_name)
    except Exception as error:
        logger.exception('Error deleting hot file: %s', file_name)
        raise InternalError('Failed to delete file.') from error
    if not exists:
        raise NotFoundError(f'File {file_name} not found.')
    logger.info('File %s deleted successfully.', file_name)
