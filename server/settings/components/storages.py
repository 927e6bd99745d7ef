"""Django storage configuration for the two storage tiers.

Both tiers are S3-compatible buckets served by django-storages:
- ``hot``: per-account working files, keys ``{account_id}/{file_name}``
- ``cold``: shared archive bucket with the same key layout

MinIO is used for local development, any S3 provider in production.
"""

from typing import Any, Final

from server.settings.components import config

_STORAGE_BACKEND: Final = 'server.apps.tiering.infrastructure.storage.TierStorage'

_CONNECTION_OPTIONS: Final[dict[str, Any]] = {
    'access_key': config('AWS_ACCESS_KEY_ID', default=None),
    'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
    'endpoint_url': config('AWS_S3_ENDPOINT_URL', default=None),
    'region_name': config('AWS_S3_REGION_NAME', default='us-east-1'),
    # Keys are deterministic, a transfer overwrites the destination
    'file_overwrite': True,
    'default_acl': None,  # Inherit bucket ACL
}

_HOT_STORAGE: Final[dict[str, Any]] = {
    'BACKEND': _STORAGE_BACKEND,
    'OPTIONS': {
        **_CONNECTION_OPTIONS,
        'bucket_name': config(
            'HOT_STORAGE_BUCKET_NAME',
            default='hot-tier',
        ),
    },
}

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': _HOT_STORAGE,
    'hot': _HOT_STORAGE,
    'cold': {
        'BACKEND': _STORAGE_BACKEND,
        'OPTIONS': {
            **_CONNECTION_OPTIONS,
            'bucket_name': config(
                'COLD_STORAGE_BUCKET_NAME',
                default='cold-archive',
            ),
            # Index entries keep a stable, unsigned object URL
            'querystring_auth': False,
            'object_parameters': {
                'StorageClass': config(
                    'COLD_STORAGE_CLASS',
                    default='STANDARD_IA',
                ),
            },
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
