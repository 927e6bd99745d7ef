"""Infrastructure layer for tiering app.

This package contains integrations with external systems:
- S3-compatible storage backend and per-tier adapters
- Upstream fetches of archive sources over HTTP
- Local staging files
- Object key and metadata helpers

Keep infrastructure concerns separate from business logic.
"""
