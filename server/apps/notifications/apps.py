"""Django app configuration for notifications app."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """Configuration for notifications app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.notifications'
    verbose_name = 'Notifications'
