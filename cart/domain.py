"""Cart value types.

A ``Cart`` is plain data: it lives in the cache between requests and is
rebuilt into a fresh ``CartSummary`` after every mutation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from catalog.selectors import StockTarget
from coupons.evaluator import CouponSnapshot
from shipping.rates import Destination, ShippingOption

ZERO = Decimal("0.00")


def make_item_id(product_id: int, variant_id: Optional[int] = None) -> str:
    if variant_id is None:
        return f"item_{product_id}"
    return f"item_{product_id}_{variant_id}"


@dataclass
class CartLineItem:
    item_id: str
    product_id: int
    variant_id: Optional[int]
    name: str
    sku: str
    unit_price: Decimal
    offer_price: Optional[Decimal]
    quantity: int
    weight_per_unit: Decimal
    available_stock: Decimal
    created_at: datetime
    modified_at: datetime

    @classmethod
    def from_target(cls, target: StockTarget, *, quantity: int, now: datetime) -> "CartLineItem":
        return cls(
            item_id=make_item_id(target.product_id, target.variant_id),
            product_id=target.product_id,
            variant_id=target.variant_id,
            name=target.name,
            sku=target.sku,
            unit_price=target.unit_price,
            offer_price=target.offer_price,
            quantity=quantity,
            weight_per_unit=target.weight,
            available_stock=target.stock,
            created_at=now,
            modified_at=now,
        )

    @property
    def effective_price(self) -> Decimal:
        return self.offer_price if self.offer_price is not None else self.unit_price

    @property
    def line_subtotal(self) -> Decimal:
        return self.effective_price * self.quantity

    @property
    def line_weight(self) -> Decimal:
        return self.weight_per_unit * self.quantity


@dataclass(frozen=True)
class DiscountLine:
    source: str
    description: str
    amount: Decimal
    percentage: Optional[Decimal] = None
    code: str = ""
    item_id: str = ""


@dataclass(frozen=True)
class CartSummary:
    item_count: int = 0
    subtotal: Decimal = ZERO
    discount_total: Decimal = ZERO
    discounts: tuple = ()
    tax_base: Decimal = ZERO
    tax: Decimal = ZERO
    shipping_cost: Decimal = ZERO
    free_shipping_eligible: bool = False
    grand_total: Decimal = ZERO
    total_weight: Decimal = ZERO


@dataclass(frozen=True)
class ShippingSelection:
    destination: Destination
    option: ShippingOption
    selected_at: datetime


@dataclass
class Cart:
    session_key: str
    created_at: datetime
    saved_at: datetime
    items: list = field(default_factory=list)
    coupon: Optional[CouponSnapshot] = None
    summary: CartSummary = field(default_factory=CartSummary)
    shipping: Optional[ShippingSelection] = None
    synced: bool = True

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_item(self, item_id: str) -> Optional[CartLineItem]:
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None


@dataclass(frozen=True)
class ReconcileResult:
    cart: Cart
    items_changed: list = field(default_factory=list)
    items_without_stock: list = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.items_changed or self.items_without_stock)
