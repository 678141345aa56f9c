"""Django app configuration for coupons."""

from django.apps import AppConfig


class CouponsConfig(AppConfig):
    """AppConfig for discount coupons applied to carts."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "coupons"
