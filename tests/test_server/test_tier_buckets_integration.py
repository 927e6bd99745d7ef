"""Integration tests for the tier buckets on a live S3-compatible service.

These tests run against MinIO (or any S3 endpoint) configured through
``MINIO_ENDPOINT`` and are deselected by default; run them with
``pytest -m integration``.
"""

import os
from io import BytesIO

import boto3
import pytest
from botocore.exceptions import ClientError
from django.conf import settings

from server.apps.tiering.infrastructure.adapters import (
    ColdStorageAdapter,
    HotStorageAdapter,
)
from server.apps.tiering.infrastructure.storage import TierStorage

_ACCOUNT_ID = 'integration-account'
_FILE_NAME = 'integration.txt'
_CONTENT = b'Hello from the tier integration test!'


def _storage(alias: str) -> TierStorage:
    options = dict(settings.STORAGES[alias]['OPTIONS'])
    options['endpoint_url'] = os.getenv('MINIO_ENDPOINT', 'http://minio:9000')
    options['access_key'] = os.getenv('MINIO_ROOT_USER', 'minioadmin')
    options['secret_key'] = os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin')
    if 'object_parameters' in options:
        # MinIO only accepts STANDARD and REDUCED_REDUNDANCY
        options['object_parameters'] = {'StorageClass': 'STANDARD'}
    return TierStorage(**options)


@pytest.fixture
def live_storages() -> dict[str, TierStorage]:
    """Build both tier storages and make sure their buckets exist.

    Returns:
        Mapping of tier alias to storage.
    """
    built = {alias: _storage(alias) for alias in ('hot', 'cold')}
    for storage in built.values():
        client = storage.connection.meta.client
        try:
            client.head_bucket(Bucket=storage.bucket_name)
        except ClientError:
            client.create_bucket(Bucket=storage.bucket_name)
    return built


@pytest.mark.integration
def test_endpoint_reachable() -> None:
    """Test that the S3 endpoint answers."""
    client = boto3.client(
        's3',
        endpoint_url=os.getenv('MINIO_ENDPOINT', 'http://minio:9000'),
        aws_access_key_id=os.getenv('MINIO_ROOT_USER', 'minioadmin'),
        aws_secret_access_key=os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin'),
        region_name='us-east-1',
    )

    assert 'Buckets' in client.list_buckets()


@pytest.mark.integration
@pytest.mark.parametrize('alias', ['hot', 'cold'])
def test_tier_object_lifecycle(live_storages, alias) -> None:
    """Test put, list, content type and delete on each tier bucket."""
    adapter_class = HotStorageAdapter if alias == 'hot' else ColdStorageAdapter
    adapter = adapter_class(live_storages[alias])

    adapter.put(_ACCOUNT_ID, _FILE_NAME, BytesIO(_CONTENT), 'text/plain')
    try:
        assert adapter.exists(_ACCOUNT_ID, _FILE_NAME)
        assert _FILE_NAME in {
            stored.name for stored in adapter.list_objects(_ACCOUNT_ID)
        }
        assert adapter.content_type(_ACCOUNT_ID, _FILE_NAME) == 'text/plain'
        assert b''.join(adapter.iter_chunks(_ACCOUNT_ID, _FILE_NAME)) == _CONTENT
    finally:
        adapter.delete(_ACCOUNT_ID, _FILE_NAME)

    assert not adapter.exists(_ACCOUNT_ID, _FILE_NAME)
