"""Django app configuration for nodes app."""

from django.apps import AppConfig


class NodesConfig(AppConfig):
    """Configuration for nodes app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.nodes'
    verbose_name = 'Storage nodes'
