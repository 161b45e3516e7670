"""Django app configuration for the drops app."""

from django.apps import AppConfig


class DropsConfig(AppConfig):
    """Creator drops, packs and the public shop."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "drops"
