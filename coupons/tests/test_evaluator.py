from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from common.choices import CouponKind
from coupons.evaluator import CouponSnapshot, evaluate, validate
from coupons.exceptions import CouponInvalid

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _coupon(kind=CouponKind.PERCENTAGE, value="10", **overrides):
    data = {
        "code": "SAVE",
        "kind": kind,
        "value": Decimal(value),
        "starts_at": NOW - timedelta(days=1),
        "ends_at": NOW + timedelta(days=1),
    }
    data.update(overrides)
    return CouponSnapshot(**data)


def test_fixed_discount_never_exceeds_subtotal():
    coupon = _coupon(CouponKind.FIXED, "50")
    assert evaluate(Decimal("200"), coupon) == Decimal("50")
    assert evaluate(Decimal("30"), coupon) == Decimal("30")


def test_percentage_discount_is_proportional():
    assert evaluate(Decimal("250"), _coupon(CouponKind.PERCENTAGE, "20")) == Decimal("50")


def test_percentage_of_hundred_caps_at_subtotal():
    assert evaluate(Decimal("80"), _coupon(CouponKind.PERCENTAGE, "100")) == Decimal("80")
    assert evaluate(Decimal("80"), _coupon(CouponKind.PERCENTAGE, "150")) == Decimal("80")


def test_maximum_discount_caps_both_kinds():
    assert evaluate(Decimal("1000"), _coupon(CouponKind.PERCENTAGE, "50", maximum_discount=Decimal("100"))) == 100
    assert evaluate(Decimal("1000"), _coupon(CouponKind.FIXED, "300", maximum_discount=Decimal("120"))) == 120


def test_free_shipping_has_no_cart_discount():
    coupon = _coupon(CouponKind.FREE_SHIPPING, "0")
    assert evaluate(Decimal("500"), coupon) == Decimal("0")
    assert coupon.grants_free_shipping


def test_zero_subtotal_gets_no_discount():
    assert evaluate(Decimal("0"), _coupon(CouponKind.FIXED, "10")) == Decimal("0")


@pytest.mark.parametrize("kind,value", [(CouponKind.FIXED, "25"), (CouponKind.PERCENTAGE, "15")])
def test_discount_is_monotonic_in_subtotal(kind, value):
    coupon = _coupon(kind, value)
    subtotals = [Decimal(s) for s in ("0", "5", "20", "24.99", "25", "100", "999.99")]
    discounts = [evaluate(s, coupon) for s in subtotals]
    assert discounts == sorted(discounts)
    assert all(0 <= d <= s for d, s in zip(discounts, subtotals))


def test_validate_accepts_coupon_in_window():
    validate(_coupon(minimum_amount=Decimal("50")), Decimal("50"), NOW)


@pytest.mark.parametrize(
    "overrides,subtotal,message",
    [
        ({"is_active": False}, "100", "not active"),
        ({"starts_at": NOW + timedelta(hours=1)}, "100", "not valid yet"),
        ({"ends_at": NOW - timedelta(seconds=1)}, "100", "expired"),
        ({"minimum_amount": Decimal("150")}, "149.99", "Minimum amount required: 150"),
    ],
)
def test_validate_rejects_with_reason(overrides, subtotal, message):
    with pytest.raises(CouponInvalid) as exc:
        validate(_coupon(**overrides), Decimal(subtotal), NOW)
    assert message in str(exc.value)
