"""Django app configuration for the fulfillment app."""

from django.apps import AppConfig


class FulfillmentConfig(AppConfig):
    """Print-on-demand fulfillment through Printify."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "fulfillment"
