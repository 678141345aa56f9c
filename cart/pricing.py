"""Cart pricing engine.

Derives a ``CartSummary`` from the line items and the applied coupon. Pure and
idempotent: amounts are kept exact while summing and rounded once, when the
summary is built.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from common.choices import CouponKind, DiscountSource
from coupons.evaluator import CouponSnapshot, evaluate, meets_minimum
from django.conf import settings

from .domain import CartLineItem, CartSummary, DiscountLine

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


@dataclass(frozen=True)
class PricingRules:
    tax_rate: Decimal = Decimal("0.18")
    free_shipping_threshold: Decimal = Decimal("150.00")


def pricing_rules_from_settings() -> PricingRules:
    return PricingRules(
        tax_rate=Decimal(str(getattr(settings, "CART_TAX_RATE", "0.18"))),
        free_shipping_threshold=Decimal(str(getattr(settings, "CART_FREE_SHIPPING_THRESHOLD", "150.00"))),
    )


def _q(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _promotions(items: list[CartLineItem]) -> list[DiscountLine]:
    lines = []
    for item in items:
        if item.offer_price is None or item.offer_price >= item.unit_price:
            continue
        saving = item.unit_price - item.offer_price
        lines.append(
            DiscountLine(
                source=DiscountSource.PROMOTION,
                description=f"Offer on {item.name}",
                amount=saving * item.quantity,
                percentage=saving / item.unit_price * HUNDRED,
                item_id=item.item_id,
            )
        )
    return lines


def coupon_applies(coupon: Optional[CouponSnapshot], subtotal: Decimal) -> bool:
    return coupon is not None and meets_minimum(coupon, subtotal)


def recompute(
    items: Iterable[CartLineItem],
    coupon: Optional[CouponSnapshot] = None,
    rules: Optional[PricingRules] = None,
) -> CartSummary:
    """Build the cart summary for ``items`` and an optional ``coupon``.

    Promotions are already part of the subtotal through the offer price, so
    they are itemized for display but only the coupon lowers the tax base.
    A coupon whose minimum is no longer met contributes nothing.
    """

    items = list(items)
    rules = rules or PricingRules()

    subtotal = sum((item.line_subtotal for item in items), ZERO)
    total_weight = sum((item.line_weight for item in items), ZERO)
    discounts = _promotions(items)

    coupon_discount = ZERO
    if coupon_applies(coupon, subtotal):
        coupon_discount = evaluate(subtotal, coupon)
        discounts.append(
            DiscountLine(
                source=DiscountSource.COUPON,
                description=coupon.description or f"Coupon {coupon.code}",
                amount=coupon_discount,
                percentage=coupon.value if coupon.kind == CouponKind.PERCENTAGE else None,
                code=coupon.code,
            )
        )

    tax_base = max(subtotal - coupon_discount, ZERO)
    tax = tax_base * rules.tax_rate
    shipping_cost = ZERO
    free_shipping = subtotal >= rules.free_shipping_threshold or (
        coupon_applies(coupon, subtotal) and coupon.grants_free_shipping
    )

    return CartSummary(
        item_count=len(items),
        subtotal=_q(subtotal),
        discount_total=_q(sum((d.amount for d in discounts), ZERO)),
        discounts=tuple(
            DiscountLine(
                source=d.source,
                description=d.description,
                amount=_q(d.amount),
                percentage=_q(d.percentage) if d.percentage is not None else None,
                code=d.code,
                item_id=d.item_id,
            )
            for d in discounts
        ),
        tax_base=_q(tax_base),
        tax=_q(tax),
        shipping_cost=_q(shipping_cost),
        free_shipping_eligible=bool(items) and free_shipping,
        grand_total=_q(tax_base + tax + shipping_cost),
        total_weight=_q(total_weight),
    )
