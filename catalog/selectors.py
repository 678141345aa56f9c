"""Selectors for the catalog domain.

Read-only lookups that turn product/variant rows into fully populated
``StockTarget`` snapshots, so cart code never touches the ORM directly.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings
from inventory.exceptions import TargetInactive, TargetMismatch, TargetNotFound

from .models import Product, ProductVariant


@dataclass(frozen=True)
class StockTarget:
    """Immutable snapshot of a product or variant as seen by the core."""

    product_id: int
    variant_id: Optional[int]
    name: str
    sku: str
    is_active: bool
    stock: Decimal
    unit_price: Decimal
    offer_price: Optional[Decimal]
    weight: Decimal


def _default_weight() -> Decimal:
    return Decimal(str(getattr(settings, "CART_DEFAULT_ITEM_WEIGHT", "0.5")))


def _effective_offer(price: Decimal, offer: Optional[Decimal]) -> Optional[Decimal]:
    # Offers at or above the list price are ignored
    if offer is None or offer <= 0 or offer >= price:
        return None
    return offer


def snapshot(product: Product, variant: Optional[ProductVariant] = None) -> StockTarget:
    """Build a ``StockTarget`` from already-loaded rows."""

    if variant is None:
        price = product.price
        return StockTarget(
            product_id=product.id,
            variant_id=None,
            name=product.name,
            sku=product.sku,
            is_active=bool(product.is_active),
            stock=product.stock,
            unit_price=price,
            offer_price=_effective_offer(price, product.offer_price),
            weight=product.weight if product.weight is not None else _default_weight(),
        )
    price = variant.price if variant.price is not None else product.price
    offer = variant.offer_price if variant.offer_price is not None else product.offer_price
    if variant.weight is not None:
        weight = variant.weight
    elif product.weight is not None:
        weight = product.weight
    else:
        weight = _default_weight()
    name = f"{product.name} ({variant.label})" if variant.label else product.name
    return StockTarget(
        product_id=product.id,
        variant_id=variant.id,
        name=name,
        sku=variant.sku,
        is_active=bool(product.is_active and variant.is_active),
        stock=variant.stock,
        unit_price=price,
        offer_price=_effective_offer(price, offer),
        weight=weight,
    )


def find_stock_target(product_id: int, variant_id: Optional[int] = None, *, require_active: bool = True) -> StockTarget:
    """Resolve a product (and optional variant) into a ``StockTarget``.

    Raises ``TargetNotFound`` for missing rows, ``TargetMismatch`` when the
    variant belongs to another product and, when ``require_active`` is set,
    ``TargetInactive`` for disabled rows.
    """

    try:
        product = Product.objects.get(id=product_id)
    except Product.DoesNotExist:
        raise TargetNotFound(f"Product {product_id} not found")
    if require_active and not product.is_active:
        raise TargetInactive(f"Product {product_id} is not active")

    variant = None
    if variant_id is not None:
        try:
            variant = ProductVariant.objects.get(id=variant_id)
        except ProductVariant.DoesNotExist:
            raise TargetNotFound(f"Variant {variant_id} not found")
        if variant.product_id != product.id:
            raise TargetMismatch(f"Variant {variant_id} does not belong to product {product_id}")
        if require_active and not variant.is_active:
            raise TargetInactive(f"Variant {variant_id} is not active")
    return snapshot(product, variant)
