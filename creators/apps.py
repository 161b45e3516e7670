"""Django app configuration for the creators app."""

from django.apps import AppConfig


class CreatorsConfig(AppConfig):
    """Creator profiles, onboarding and public storefronts."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "creators"
