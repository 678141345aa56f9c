"""Django app configuration for the Cart app."""

from django.apps import AppConfig


class CartConfig(AppConfig):
    """AppConfig for cache-backed shopping carts (no database tables)."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "cart"
