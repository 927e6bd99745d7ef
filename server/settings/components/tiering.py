"""Hot/cold migration settings."""

from server.settings.components import config

# Directory for archive staging files, None means the system temp dir
TIERING_STAGING_DIR = config('TIERING_STAGING_DIR', default='') or None

# Timeout in seconds for fetching archive sources
TIERING_FETCH_TIMEOUT = config('TIERING_FETCH_TIMEOUT', cast=float, default=60)
