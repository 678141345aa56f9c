"""Coupon models.

Codes are stored upper-case so lookups are case-insensitive by construction.
"""

from common.choices import CouponKind
from django.db import models


class Coupon(models.Model):
    KIND_FIXED = CouponKind.FIXED
    KIND_PERCENTAGE = CouponKind.PERCENTAGE
    KIND_FREE_SHIPPING = CouponKind.FREE_SHIPPING
    KIND_CHOICES = CouponKind.choices

    code = models.CharField(max_length=40, unique=True)
    description = models.CharField(max_length=200, blank=True)
    kind = models.CharField(max_length=16, choices=KIND_CHOICES)
    value = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    minimum_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    maximum_discount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    times_used = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-starts_at", "code"]
        constraints = [
            models.CheckConstraint(name="coupon_value_non_negative", condition=models.Q(value__gte=0)),
            models.CheckConstraint(name="coupon_window_ordered", condition=models.Q(ends_at__gte=models.F("starts_at"))),
        ]
        indexes = [
            models.Index(fields=["is_active", "starts_at", "ends_at"], name="coupons_cou_is_acti_3d7f0c_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code} ({self.kind} {self.value})"

    def save(self, *args, **kwargs):
        self.code = normalize_code(self.code)
        super().save(*args, **kwargs)


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()
