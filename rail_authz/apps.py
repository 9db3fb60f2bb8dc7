"""
Django app configuration for rail-authz.

On startup the app connects model signals so ORM writes invalidate the
engine's caches.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class AuthzConfig(AppConfig):
    """Django app configuration for rail-authz."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "rail_authz"
    verbose_name = "Rail Authz"
    label = "rail_authz"

    def ready(self):
        """Connect cache invalidation signals."""
        from .config_proxy import get_setting

        if get_setting("signals.enable_model_signals", True):
            from .signals import connect_model_signals

            connect_model_signals()
