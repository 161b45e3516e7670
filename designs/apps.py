"""Django app configuration for the designs app."""

from django.apps import AppConfig


class DesignsConfig(AppConfig):
    """AI-generated sticker designs."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "designs"
