"""Django app configuration for accounts app."""

from typing import override

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Configuration for accounts app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.accounts'
    verbose_name = 'Accounts'

    @override
    def ready(self) -> None:
        """Import signal handlers when app is ready."""
        from server.apps.accounts import signals  # noqa: F401
