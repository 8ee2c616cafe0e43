"""Django app configuration for matters app."""

from typing import override

from django.apps import AppConfig


class MattersConfig(AppConfig):
    """Configuration for matters app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.matters'
    verbose_name = 'Matters'

    @override
    def ready(self) -> None:
        """Import signal handlers when app is ready."""
        from server.apps.matters import signals  # noqa: F401
