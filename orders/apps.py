"""Django app configuration for the orders app."""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Orders, Stripe payments and idempotent request handling."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
