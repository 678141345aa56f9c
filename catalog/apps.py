"""Django app configuration for catalog."""

from django.apps import AppConfig


class CatalogConfig(AppConfig):
    """AppConfig for products and variants, the stock-bearing targets."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "catalog"
