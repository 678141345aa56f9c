"""Shared enumerations and choices used across apps."""

from django.db import models


class MovementKind(models.TextChoices):
    """Closed set of inventory movement kinds recorded in the ledger."""

    INFLOW = "inflow", "Inflow"
    OUTFLOW = "outflow", "Outflow"
    ADJUSTMENT = "adjustment", "Adjustment"
    RESERVE = "reserve", "Reserve"
    RELEASE = "release", "Release"


class CouponKind(models.TextChoices):
    FIXED = "fixed", "Fixed amount"
    PERCENTAGE = "percentage", "Percentage"
    FREE_SHIPPING = "free_shipping", "Free shipping"


class DiscountSource(models.TextChoices):
    """Origin of an itemized cart discount."""

    PROMOTION = "promotion", "Promotion"
    COUPON = "coupon", "Coupon"
