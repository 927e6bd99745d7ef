"""Shared fixtures for tiering app tests."""

from collections.abc import Callable

import httpx
import pytest

from server.apps.tiering.infrastructure.fetch import SourceFetcher
from server.apps.tiering.logic.migration import MigrationEngine


@pytest.fixture(autouse=True)
def staging_dir(settings, tmp_path):
    """Point staging files to an isolated directory.

    Returns:
        Path of the staging directory.
    """
    directory = tmp_path / 'staging'
    directory.mkdir()
    settings.TIERING_STAGING_DIR = str(directory)
    return directory


@pytest.fixture
def make_fetcher() -> Callable[..., SourceFetcher]:
    """Factory for fetchers answering every request from a handler.

    Returns:
        Function taking an ``httpx.MockTransport`` handler.
    """

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> SourceFetcher:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        return SourceFetcher(client=client)

    return factory


@pytest.fixture
def engine(hot, cold) -> MigrationEngine:
    """Migration engine over the mocked buckets."""
    return MigrationEngine(hot=hot, cold=cold)
