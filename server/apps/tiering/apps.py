"""Django app configuration for tiering app."""

from django.apps import AppConfig


class TieringConfig(AppConfig):
    """Configuration for tiering app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.tiering'
    verbose_name = 'Storage tiers'
