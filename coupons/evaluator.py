"""Coupon evaluator.

Validates a coupon snapshot and computes its cart discount. Pure: the clock
and the subtotal are inputs, the coupon is an immutable snapshot.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from common.choices import CouponKind

from .exceptions import CouponInvalid

HUNDRED = Decimal("100")
ZERO = Decimal("0")


@dataclass(frozen=True)
class CouponSnapshot:
    code: str
    kind: CouponKind
    value: Decimal
    starts_at: datetime
    ends_at: datetime
    minimum_amount: Optional[Decimal] = None
    maximum_discount: Optional[Decimal] = None
    is_active: bool = True
    description: str = ""

    @classmethod
    def from_model(cls, coupon) -> "CouponSnapshot":
        return cls(
            code=coupon.code,
            kind=CouponKind(coupon.kind),
            value=coupon.value,
            starts_at=coupon.starts_at,
            ends_at=coupon.ends_at,
            minimum_amount=coupon.minimum_amount,
            maximum_discount=coupon.maximum_discount,
            is_active=bool(coupon.is_active),
            description=coupon.description,
        )

    @property
    def grants_free_shipping(self) -> bool:
        return self.kind == CouponKind.FREE_SHIPPING


def meets_minimum(coupon: CouponSnapshot, subtotal: Decimal) -> bool:
    return coupon.minimum_amount is None or subtotal >= coupon.minimum_amount


def validate(coupon: CouponSnapshot, subtotal: Decimal, now: datetime) -> None:
    """Raise ``CouponInvalid`` with a reason if the coupon cannot be applied."""

    if not coupon.is_active:
        raise CouponInvalid("Coupon is not active")
    if now < coupon.starts_at:
        raise CouponInvalid("Coupon is not valid yet")
    if now > coupon.ends_at:
        raise CouponInvalid("Coupon has expired")
    if not meets_minimum(coupon, subtotal):
        raise CouponInvalid(f"Minimum amount required: {coupon.minimum_amount}")


def evaluate(subtotal: Decimal, coupon: CouponSnapshot) -> Decimal:
    """Discount granted by ``coupon`` on ``subtotal`` (unrounded)."""

    if subtotal <= 0:
        return ZERO
    kind = CouponKind(coupon.kind)
    if kind == CouponKind.FIXED:
        discount = coupon.value
    elif kind == CouponKind.PERCENTAGE:
        discount = subtotal * coupon.value / HUNDRED
    else:
        # Free shipping is realized by the shipping quote, not the cart discount
        return ZERO

    if coupon.maximum_discount is not None:
        discount = min(discount, coupon.maximum_discount)
    return max(min(discount, subtotal), ZERO)
