"""Object key and metadata helpers for tiered files."""

import mimetypes
from typing import Final

from server.common.errors import InvalidArgumentError

DEFAULT_CONTENT_TYPE: Final = 'application/octet-stream'

_KEY_SEPARATOR: Final = '/'
_MAX_FILE_NAME_LENGTH: Final = 512


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from filename extension.

    Args:
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return DEFAULT_CONTENT_TYPE
    return mime_type


def validate_file_name(file_name: str) -> str:
    """Validate a file name used inside an account namespace.

    File names are flat: they may not contain path separators or
    relative components, so a key can never escape its account prefix.

    Args:
        file_name: Proposed file name.

    Returns:
        The same file name.

    Raises:
        InvalidArgumentError: If the name is empty or not a plain name.
    """
    if not file_name or not isinstance(file_name, str):
        raise InvalidArgumentError('File name is required.')

    if len(file_name) > _MAX_FILE_NAME_LENGTH:
        raise InvalidArgumentError('File name is too long.')

    if _KEY_SEPARATOR in file_name or '\\' in file_name:
        raise InvalidArgumentError('File name may not contain path separators.')

    if file_name in {'.', '..'} or '\x00' in file_name:
        raise InvalidArgumentError(f'Invalid file name: {file_name!r}')

    return file_name


def build_object_key(account_id: str, file_name: str) -> str:
    """Build the storage key for a file.

    Args:
        account_id: Owner's account id.
        file_name: Plain file name.

    Returns:
        Key of the form ``{account_id}/{file_name}``.

    Raises:
        InvalidArgumentError: If the account id or file name is invalid.
    """
    if not account_id or _KEY_SEPARATOR in account_id:
        raise InvalidArgumentError('Invalid account id.')
    validate_file_name(file_name)
    return f'{account_id}{_KEY_SEPARATOR}{file_name}'


def account_prefix(account_id: str) -> str:
    """Build the key prefix for an account namespace.

    Example: 'abc123' -> 'abc123/'
    """
    return f'{account_id}{_KEY_SEPARATOR}'

