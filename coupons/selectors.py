"""Selectors for coupon lookup."""

from datetime import datetime
from typing import Optional

from django.db.models import F, Q

from .evaluator import CouponSnapshot
from .models import Coupon, normalize_code


def find_active_by_code(code: str, now: datetime) -> Optional[CouponSnapshot]:
    """Return a snapshot of the active, in-window coupon for ``code``.

    Coupons that reached their usage limit are treated as missing.
    """

    code = normalize_code(code)
    if not code:
        return None
    coupon = (
        Coupon.objects.filter(code=code, is_active=True, starts_at__lte=now, ends_at__gte=now)
        .filter(Q(usage_limit__isnull=True) | Q(times_used__lt=F("usage_limit")))
        .first()
    )
    if coupon is None:
        return None
    return CouponSnapshot.from_model(coupon)
