"""Coupon services."""

import logging

from django.db import transaction
from django.db.models import F, Q

from .exceptions import CouponInvalid
from .models import Coupon, normalize_code

logger = logging.getLogger("storefront.coupons")


@transaction.atomic
def redeem(*, code: str) -> None:
    """Count one use of a coupon, refusing once its usage limit is reached.

    The increment is a single conditional UPDATE so concurrent checkouts
    cannot overshoot the limit. Checkout lives outside this project: the
    order flow calls this once per placed order, after the cart's coupon
    has been validated. Until it does, ``usage_limit`` stays unenforced.
    """

    code = normalize_code(code)
    updated = (
        Coupon.objects.filter(code=code)
        .filter(Q(usage_limit__isnull=True) | Q(times_used__lt=F("usage_limit")))
        .update(times_used=F("times_used") + 1)
    )
    if not updated:
        raise CouponInvalid("Coupon is unknown or has no uses left")
    logger.info("coupon.redeemed", extra={"event": "coupon.redeemed", "code": code})
