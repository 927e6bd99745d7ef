"""Streaming fetch of archive sources over HTTP."""

import logging
from dataclasses import dataclass
from typing import IO, Final

import httpx
from django.conf import settings

from server.apps.tiering.infrastructure.metadata import DEFAULT_CONTENT_TYPE
from server.common.errors import UpstreamFetchError

logger = logging.getLogger(__name__)

_CHUNK_SIZE: Final = 64 * 1024


@dataclass(frozen=True, slots=True)
class FetchedSource:
    """Result of streaming a source into a staging file."""

    content_type: str
    size_bytes: int


class SourceFetcher:
    """Download a source URL into a writable file.

    A fresh ``httpx.Client`` is used per fetch unless a client is
    injected (tests pass one with a mock transport). Redirects are not
    followed: a redirect answer counts as a failed fetch.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            client: Optional shared client, not closed by the fetcher.
            timeout: Request timeout in seconds, ``TIERING_FETCH_TIMEOUT``
                by default.
        """
        self._client = client
        self._timeout = timeout

    def fetch(self, url: str, destination: IO[bytes]) -> FetchedSource:
        """Stream the body of ``url`` into ``destination``.

        Args:
            url: Source URL.
            destination: Writable binary file.

        Returns:
            FetchedSource with the response content type and byte count.

        Raises:
            UpstreamFetchError: If the source is unreachable or answers
                with a non-success status.
        """
        if self._client is not None:
            return self._stream(self._client, url, destination)

        timeout = self._timeout or settings.TIERING_FETCH_TIMEOUT
        with httpx.Client(timeout=timeout, follow_redirects=False) as client:
            return self._stream(client, url, destination)

    def _stream(
        self,
        client: httpx.Client,
        url: str,
        destination: IO[bytes],
    ) -> FetchedSource:
        logger.info('Fetching file from URL: %s', url)
        size_bytes = 0
        try:
            with client.stream('GET', url) as response:
                if not response.is_success:
                    logger.warning(
                        'Source answered %d: %s',
                        response.status_code,
                        url,
                    )
                    raise UpstreamFetchError(
                        f'Failed to fetch file. Status: {response.status_code}',
                    )
                content_type = (
                    response.headers.get('content-type') or DEFAULT_CONTENT_TYPE
                )
                for chunk in response.iter_bytes(_CHUNK_SIZE):
                    destination.write(chunk)
                    size_bytes += len(chunk)
        except httpx.HTTPError as error:
            logger.exception('Failed to fetch file from URL: %s', url)
            raise UpstreamFetchError('Failed to fetch file.') from error

        destination.flush()
        logger.info('Fetched %d bytes (%s) from %s', size_bytes, content_type, url)
        return FetchedSource(content_type=content_type, size_bytes=size_bytes)
