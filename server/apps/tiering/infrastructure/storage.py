"""Custom storage backend for S3-compatible tier buckets."""

import logging
from typing import Any, final, override

from botocore.exceptions import ClientError
from storages.backends.s3 import S3Storage
from storages.utils import clean_name

logger = logging.getLogger(__name__)


@final
class TierStorage(S3Storage):
    """S3 storage backend used by both the hot and cold tier.

    Extends django-storages S3Storage with:
    - Enhanced error logging on writes and deletes
    - Object existence via HEAD, independent of ``file_overwrite``
    - Flat listing of one key prefix
    - Content type lookup of stored objects
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file to S3 with error handling and logging.

        Args:
            name: Storage key for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage key used.

        Raises:
            Exception: If S3 upload fails.
        """
        try:
            logger.info('Uploading object to %s: %s', self.bucket_name, name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully uploaded object: %s', saved_name)
        except Exception:
            logger.exception(
                'Failed to upload object to %s: %s',
                self.bucket_name,
                name,
            )
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete object from S3 with error handling and logging.

        Args:
            name: Storage key of the object to delete.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting object from %s: %s', self.bucket_name, name)
            super().delete(name)
            logger.info('Successfully deleted object: %s', name)
        except Exception:
            logger.exception(
                'Failed to delete object from %s: %s',
                self.bucket_name,
                name,
            )
            raise

    @override
    def exists(self, name: str) -> bool:
        """Check whether an object exists in the bucket.

        Args:
            name: Storage key.

        Returns:
            True if a HEAD request finds the object.
        """
        key = self._normalize_name(clean_name(name))
        try:
            self.connection.meta.client.head_object(
                Bucket=self.bucket_name,
                Key=key,
            )
        except ClientError as error:
            if error.response['ResponseMetadata']['HTTPStatusCode'] == 404:
                return False
            raise
        return True

    def list_prefix(self, prefix: str) -> list[str]:
        """List object names directly under a key prefix.

        Args:
            prefix: Key prefix (e.g., 'abc123/').

        Returns:
            Names relative to the prefix, nested keys excluded.
        """
        _directories, files = self.listdir(prefix)
        return sorted(files)

    def list_top_level(self) -> list[str]:
        """List the first key components present in the bucket.

        Returns:
            Sorted top-level prefixes without trailing slash.
        """
        directories, _files = self.listdir('')
        return sorted(directories)

    def content_type(self, name: str) -> str | None:
        """Look up the stored content type of an object.

        Args:
            name: Storage key.

        Returns:
            Content type, or None if the object has none.
        """
        key = self._normalize_name(clean_name(name))
        return self.bucket.Object(key).content_type or None
