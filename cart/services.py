"""Cart services: mutations over a cached cart.

Every operation loads the cart for ``ctx.session_key``, applies one change,
recomputes the summary and stores the result with a single ``put``. Nothing
is written when an operation raises.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Optional

from catalog.selectors import StockTarget, find_stock_target
from coupons.evaluator import CouponSnapshot, validate
from coupons.exceptions import CouponAlreadyApplied, CouponInvalid
from coupons.models import normalize_code
from coupons.selectors import find_active_by_code
from django.conf import settings
from inventory.exceptions import InsufficientStock, InvalidQuantity, MovementError
from shipping.rates import Destination, ShippingOption, ShippingUnavailable, pick_option, quote_options

from .domain import Cart, CartLineItem, ReconcileResult, ShippingSelection, make_item_id
from .exceptions import CartEmpty, ItemNotFound, OutOfRange
from .pricing import PricingRules, coupon_applies, pricing_rules_from_settings, recompute
from .store import CartStore, cart_ttl

logger = logging.getLogger("storefront.cart")


@dataclass(frozen=True)
class CartContext:
    """Everything a cart operation needs besides its arguments."""

    session_key: str
    store: CartStore
    now: datetime
    lookup: Callable[..., StockTarget] = find_stock_target
    find_coupon: Callable[[str, datetime], Optional[CouponSnapshot]] = find_active_by_code
    rules: Optional[PricingRules] = field(default=None)


def _max_quantity() -> int:
    return int(getattr(settings, "CART_MAX_QUANTITY_PER_ITEM", 99))


def _max_items() -> int:
    return int(getattr(settings, "CART_MAX_ITEMS", 50))


def _new_cart(ctx: CartContext) -> Cart:
    return Cart(session_key=ctx.session_key, created_at=ctx.now, saved_at=ctx.now)


def _load(ctx: CartContext) -> Cart:
    cart = ctx.store.get(ctx.session_key)
    return cart if cart is not None else _new_cart(ctx)


def _refresh_shipping(cart: Cart) -> None:
    """Re-quote the selected option against the current weight and subtotal."""

    if cart.shipping is None:
        return
    if cart.is_empty:
        cart.shipping = None
        return
    options = quote_options(
        cart.shipping.destination,
        cart.summary.total_weight,
        cart.summary.subtotal,
        free_shipping=coupon_applies(cart.coupon, cart.summary.subtotal) and cart.coupon.grants_free_shipping,
    )
    try:
        option = pick_option(options, cart.shipping.option.code)
    except ShippingUnavailable:
        cart.shipping = None
        return
    cart.shipping = replace(cart.shipping, option=option)


def _save(ctx: CartContext, cart: Cart, *, synced: bool = False) -> Cart:
    cart.summary = recompute(cart.items, cart.coupon, ctx.rules or pricing_rules_from_settings())
    _refresh_shipping(cart)
    cart.saved_at = ctx.now
    cart.synced = synced
    ctx.store.put(ctx.session_key, cart, cart_ttl())
    return cart


def _log(event: str, ctx: CartContext, **fields) -> None:
    logger.info(event, extra={"event": event, "session_key": ctx.session_key, **fields})


def _set_quantity(ctx: CartContext, cart: Cart, item: CartLineItem, quantity: int) -> Cart:
    if quantity <= 0:
        return _drop(ctx, cart, item)
    if quantity > _max_quantity():
        raise OutOfRange(f"Maximum quantity per item is {_max_quantity()}")
    item.quantity = quantity
    item.modified_at = ctx.now
    _log("cart.item_updated", ctx, item_id=item.item_id, quantity=quantity)
    return _save(ctx, cart)


def _drop(ctx: CartContext, cart: Cart, item: CartLineItem) -> Cart:
    cart.items.remove(item)
    _log("cart.item_removed", ctx, item_id=item.item_id)
    return _save(ctx, cart)


def get_cart(ctx: CartContext) -> Cart:
    """Return the stored cart (or a fresh empty one) with an up-to-date summary."""

    cart = _load(ctx)
    cart.summary = recompute(cart.items, cart.coupon, ctx.rules or pricing_rules_from_settings())
    return cart


def add_item(ctx: CartContext, *, product_id: int, quantity: int, variant_id: Optional[int] = None) -> Cart:
    """Add a product or variant, merging with an existing line for the same target."""

    if quantity < 1:
        raise InvalidQuantity("Quantity must be at least 1")
    target = ctx.lookup(product_id, variant_id)
    cart = _load(ctx)

    existing = cart.find_item(make_item_id(target.product_id, target.variant_id))
    wanted = quantity + (existing.quantity if existing else 0)
    if wanted > _max_quantity():
        raise OutOfRange(f"Maximum quantity per item is {_max_quantity()}")
    if wanted > target.stock:
        raise InsufficientStock(f"Insufficient stock. Current stock: {target.stock}")

    if existing is not None:
        existing.available_stock = target.stock
        return _set_quantity(ctx, cart, existing, wanted)

    if len(cart.items) >= _max_items():
        raise OutOfRange(f"A cart holds at most {_max_items()} different items")
    item = CartLineItem.from_target(target, quantity=quantity, now=ctx.now)
    cart.items.append(item)
    _log("cart.item_added", ctx, item_id=item.item_id, quantity=quantity)
    return _save(ctx, cart)


def update_quantity(ctx: CartContext, *, item_id: str, quantity: int) -> Cart:
    """Set a line's quantity; zero or less removes the line."""

    cart = _load(ctx)
    item = cart.find_item(item_id)
    if item is None:
        raise ItemNotFound(f"Item {item_id} is not in the cart")
    return _set_quantity(ctx, cart, item, quantity)


def remove_item(ctx: CartContext, *, item_id: str) -> Cart:
    cart = _load(ctx)
    item = cart.find_item(item_id)
    if item is None:
        raise ItemNotFound(f"Item {item_id} is not in the cart")
    return _drop(ctx, cart, item)


def clear(ctx: CartContext) -> Cart:
    """Reset to an empty cart, dropping the coupon and the shipping selection."""

    cart = _load(ctx)
    cart.items = []
    cart.coupon = None
    cart.shipping = None
    _log("cart.cleared", ctx)
    return _save(ctx, cart, synced=True)


def apply_coupon(ctx: CartContext, *, code: str) -> Cart:
    cart = _load(ctx)
    if cart.coupon is not None:
        raise CouponAlreadyApplied(f"Coupon {cart.coupon.code} is already applied. Remove it first.")

    coupon = ctx.find_coupon(code, ctx.now)
    if coupon is None:
        raise CouponInvalid("Coupon is not valid or has expired")
    subtotal = recompute(cart.items, None, ctx.rules or pricing_rules_from_settings()).subtotal
    validate(coupon, subtotal, ctx.now)

    cart.coupon = coupon
    _log("cart.coupon_applied", ctx, code=coupon.code)
    return _save(ctx, cart)


def remove_coupon(ctx: CartContext, *, code: str) -> Cart:
    cart = _load(ctx)
    if cart.coupon is None or cart.coupon.code != normalize_code(code):
        raise CouponInvalid(f"Coupon {normalize_code(code)} is not applied to this cart")
    cart.coupon = None
    _log("cart.coupon_removed", ctx, code=normalize_code(code))
    return _save(ctx, cart)


def reconcile_availability(ctx: CartContext) -> ReconcileResult:
    """Re-check live stock for every line.

    Lines whose target is gone, inactive or out of stock are dropped; lines
    asking for more than the stock left are lowered to it. Running it twice
    without a stock change reports nothing the second time.
    """

    cart = _load(ctx)
    kept, changed, without_stock = [], [], []
    for item in cart.items:
        try:
            target = ctx.lookup(item.product_id, item.variant_id)
        except MovementError:
            without_stock.append(item)
            continue

        available = math.floor(target.stock) if target.stock > 0 else 0
        item.available_stock = target.stock
        if available <= 0:
            without_stock.append(item)
            continue
        if item.quantity > available:
            item.quantity = available
            item.modified_at = ctx.now
            changed.append(item)
        kept.append(item)

    cart.items = kept
    if changed or without_stock:
        logger.info(
            "cart.reconciled",
            extra={
                "event": "cart.reconciled",
                "session_key": ctx.session_key,
                "items_changed": [i.item_id for i in changed],
                "items_without_stock": [i.item_id for i in without_stock],
            },
        )
    cart = _save(ctx, cart, synced=True)
    return ReconcileResult(cart=cart, items_changed=changed, items_without_stock=without_stock)


def quote_shipping(ctx: CartContext, *, destination: Destination) -> list[ShippingOption]:
    """Ranked shipping options for the current cart contents."""

    cart = get_cart(ctx)
    if cart.is_empty:
        raise CartEmpty("Add items to the cart before quoting shipping")
    return quote_options(
        destination,
        cart.summary.total_weight,
        cart.summary.subtotal,
        free_shipping=coupon_applies(cart.coupon, cart.summary.subtotal) and cart.coupon.grants_free_shipping,
    )


def select_shipping(ctx: CartContext, *, destination: Destination, option_code: str) -> Cart:
    options = quote_shipping(ctx, destination=destination)
    option = pick_option(options, option_code)
    cart = _load(ctx)
    cart.shipping = ShippingSelection(destination=destination, option=option, selected_at=ctx.now)
    _log("cart.shipping_selected", ctx, option=option.code, price=str(option.price))
    return _save(ctx, cart, synced=cart.synced)
