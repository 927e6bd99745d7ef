"""Local staging files for transfers between tiers.

Every transfer stages bytes on local disk instead of holding the whole
object in memory. A staging file belongs to exactly one call and is
removed on every exit path of that call.
"""

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from django.conf import settings

logger = logging.getLogger(__name__)


@contextmanager
def staged_file(prefix: str = 'staged-') -> Iterator[IO[bytes]]:
    """Create a fresh staging file and remove it afterwards.

    Removal is best-effort: a failure is logged and never raised, so it
    cannot mask the outcome of the transfer itself.

    Args:
        prefix: Filename prefix for the staging file.

    Yields:
        Binary file handle opened for reading and writing.
    """
    handle = tempfile.NamedTemporaryFile(  # noqa: SIM115
        mode='w+b',
        prefix=prefix,
        dir=settings.TIERING_STAGING_DIR,
        delete=False,
    )
    logger.debug('Staging file created: %s', handle.name)
    try:
        yield handle
    finally:
        release_staged_file(handle)


def release_staged_file(handle: IO[bytes]) -> None:
    """Close and unlink a staging file, logging failures.

    Args:
        handle: Staging file handle.
    """
    path = Path(handle.name)
    try:
        handle.close()
        path.unlink(missing_ok=True)
        logger.debug('Staging file removed: %s', path)
    except OSError:
        logger.exception('Failed to remove staging file: %s', path)
