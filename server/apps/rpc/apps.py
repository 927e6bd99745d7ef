"""Django app configuration for rpc app."""

from django.apps import AppConfig


class RpcConfig(AppConfig):
    """Configuration for rpc app."""

    name = 'server.apps.rpc'
    verbose_name = 'Callable endpoints'
