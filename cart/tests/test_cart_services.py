from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from cart import services
from cart.exceptions import CartEmpty, ItemNotFound, OutOfRange
from cart.services import CartContext
from cart.store import CacheCartStore
from catalog.selectors import StockTarget
from common.choices import CouponKind
from coupons.evaluator import CouponSnapshot
from coupons.exceptions import CouponAlreadyApplied, CouponInvalid
from coupons.models import normalize_code
from django.test import override_settings
from inventory.exceptions import InsufficientStock, InvalidQuantity, TargetInactive, TargetNotFound
from shipping.rates import Destination, ShippingUnavailable

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
LIMA = Destination.normalized("Lima", "Lima")


class FakeCatalog:
    """In-memory stand-in for ``find_stock_target``."""

    def __init__(self, *targets):
        self.targets = {(t.product_id, t.variant_id): t for t in targets}
        self.inactive = set()

    def __call__(self, product_id, variant_id=None):
        key = (product_id, variant_id)
        if key not in self.targets:
            raise TargetNotFound(f"Product {product_id} not found")
        if key in self.inactive:
            raise TargetInactive(f"Product {product_id} is not active")
        return self.targets[key]

    def set_stock(self, product_id, stock, variant_id=None):
        key = (product_id, variant_id)
        self.targets[key] = replace(self.targets[key], stock=Decimal(stock))


def _target(product_id, variant_id=None, price="100", offer=None, stock="10", weight="0.5"):
    return StockTarget(
        product_id=product_id,
        variant_id=variant_id,
        name=f"Product {product_id}",
        sku=f"SKU-{product_id}-{variant_id or 0}",
        is_active=True,
        stock=Decimal(stock),
        unit_price=Decimal(price),
        offer_price=Decimal(offer) if offer else None,
        weight=Decimal(weight),
    )


COUPONS = {
    "SAVE10": CouponSnapshot(
        code="SAVE10",
        kind=CouponKind.PERCENTAGE,
        value=Decimal("10"),
        starts_at=NOW - timedelta(days=1),
        ends_at=NOW + timedelta(days=1),
    ),
    "BIG": CouponSnapshot(
        code="BIG",
        kind=CouponKind.FIXED,
        value=Decimal("20"),
        starts_at=NOW - timedelta(days=1),
        ends_at=NOW + timedelta(days=1),
        minimum_amount=Decimal("500"),
    ),
}


def _find_coupon(code, now):
    return COUPONS.get(normalize_code(code))


@pytest.fixture
def catalog():
    return FakeCatalog(
        _target(1, price="100", offer="80"),
        _target(2, price="25", stock="3"),
        _target(3, variant_id=30, price="12", stock="2.5"),
    )


@pytest.fixture
def ctx(catalog):
    return CartContext(
        session_key="guest:abc",
        store=CacheCartStore(),
        now=NOW,
        lookup=catalog,
        find_coupon=_find_coupon,
    )


def test_get_cart_returns_empty_cart_without_storing(ctx):
    cart = services.get_cart(ctx)

    assert cart.is_empty
    assert cart.summary.grand_total == Decimal("0.00")
    assert ctx.store.get(ctx.session_key) is None


def test_add_item_creates_line_and_stores_cart(ctx):
    cart = services.add_item(ctx, product_id=1, quantity=2)

    assert [i.item_id for i in cart.items] == ["item_1"]
    assert cart.summary.subtotal == Decimal("160.00")
    assert cart.synced is False
    stored = ctx.store.get(ctx.session_key)
    assert stored.summary == cart.summary


def test_add_same_target_merges_lines(ctx):
    services.add_item(ctx, product_id=1, quantity=2)
    cart = services.add_item(ctx, product_id=1, quantity=3)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 5


def test_variant_gets_its_own_line(ctx):
    services.add_item(ctx, product_id=1, quantity=1)
    cart = services.add_item(ctx, product_id=3, variant_id=30, quantity=2)

    assert [i.item_id for i in cart.items] == ["item_1", "item_3_30"]
    assert cart.summary.item_count == 2


def test_add_item_rejections_leave_cart_untouched(ctx):
    services.add_item(ctx, product_id=2, quantity=2)

    with pytest.raises(InvalidQuantity):
        services.add_item(ctx, product_id=2, quantity=0)
    with pytest.raises(InsufficientStock):
        services.add_item(ctx, product_id=2, quantity=2)
    with pytest.raises(TargetNotFound):
        services.add_item(ctx, product_id=99, quantity=1)

    assert ctx.store.get(ctx.session_key).items[0].quantity == 2


def test_fractional_stock_bounds_quantity(ctx):
    with pytest.raises(InsufficientStock):
        services.add_item(ctx, product_id=3, variant_id=30, quantity=3)


@override_settings(CART_MAX_QUANTITY_PER_ITEM=4)
def test_max_quantity_per_item(ctx):
    services.add_item(ctx, product_id=1, quantity=4)
    with pytest.raises(OutOfRange):
        services.add_item(ctx, product_id=1, quantity=1)
    with pytest.raises(OutOfRange):
        services.update_quantity(ctx, item_id="item_1", quantity=5)


@override_settings(CART_MAX_ITEMS=1)
def test_max_distinct_items(ctx):
    services.add_item(ctx, product_id=1, quantity=1)
    with pytest.raises(OutOfRange):
        services.add_item(ctx, product_id=2, quantity=1)
    # merging into the existing line is still allowed
    assert services.add_item(ctx, product_id=1, quantity=1).items[0].quantity == 2


def test_update_quantity_and_zero_removes(ctx):
    services.add_item(ctx, product_id=1, quantity=1)
    services.add_item(ctx, product_id=2, quantity=1)

    cart = services.update_quantity(ctx, item_id="item_2", quantity=3)
    assert cart.find_item("item_2").quantity == 3

    cart = services.update_quantity(ctx, item_id="item_2", quantity=0)
    assert cart.find_item("item_2") is None
    assert cart.summary.item_count == 1


def test_unknown_item_raises(ctx):
    with pytest.raises(ItemNotFound):
        services.update_quantity(ctx, item_id="item_404", quantity=1)
    with pytest.raises(ItemNotFound):
        services.remove_item(ctx, item_id="item_404")


def test_remove_item(ctx):
    services.add_item(ctx, product_id=1, quantity=1)
    cart = services.remove_item(ctx, item_id="item_1")

    assert cart.is_empty
    assert ctx.store.get(ctx.session_key).is_empty


def test_clear_drops_coupon_and_shipping(ctx):
    services.add_item(ctx, product_id=1, quantity=1)
    services.apply_coupon(ctx, code="save10")
    services.select_shipping(ctx, destination=LIMA, option_code="standard")

    cart = services.clear(ctx)

    assert cart.is_empty
    assert cart.coupon is None
    assert cart.shipping is None
    assert cart.summary.grand_total == Decimal("0.00")


def test_coupon_lifecycle(ctx):
    services.add_item(ctx, product_id=1, quantity=2)

    cart = services.apply_coupon(ctx, code=" save10 ")
    assert cart.coupon.code == "SAVE10"
    assert cart.summary.tax_base == Decimal("144.00")

    with pytest.raises(CouponAlreadyApplied):
        services.apply_coupon(ctx, code="SAVE10")
    with pytest.raises(CouponInvalid):
        services.remove_coupon(ctx, code="OTHER")

    cart = services.remove_coupon(ctx, code="save10")
    assert cart.coupon is None
    assert cart.summary.tax_base == Decimal("160.00")


def test_apply_coupon_rejections(ctx):
    services.add_item(ctx, product_id=2, quantity=1)

    with pytest.raises(CouponInvalid):
        services.apply_coupon(ctx, code="NOPE")
    with pytest.raises(CouponInvalid):
        services.apply_coupon(ctx, code="BIG")
    assert ctx.store.get(ctx.session_key).coupon is None


def test_reconcile_clamps_and_drops(ctx, catalog):
    services.add_item(ctx, product_id=1, quantity=5)
    services.add_item(ctx, product_id=2, quantity=3)
    services.add_item(ctx, product_id=3, variant_id=30, quantity=2)

    catalog.set_stock(1, "2")
    catalog.inactive.add((2, None))
    catalog.set_stock(3, "0.5", variant_id=30)

    result = services.reconcile_availability(ctx)

    assert result.changed
    assert [i.item_id for i in result.items_changed] == ["item_1"]
    assert sorted(i.item_id for i in result.items_without_stock) == ["item_2", "item_3_30"]
    assert [(i.item_id, i.quantity) for i in result.cart.items] == [("item_1", 2)]
    assert result.cart.items[0].available_stock == Decimal("2")
    assert result.cart.synced is True

    again = services.reconcile_availability(ctx)
    assert not again.changed
    assert again.cart.items[0].quantity == 2


def test_quote_requires_items(ctx):
    with pytest.raises(CartEmpty):
        services.quote_shipping(ctx, destination=LIMA)


def test_select_shipping_is_requoted_on_changes(ctx):
    services.add_item(ctx, product_id=2, quantity=1)

    cart = services.select_shipping(ctx, destination=LIMA, option_code="standard")
    assert cart.shipping.option.price == Decimal("10")

    # 80 * 2 = 160 crosses the standard free-shipping threshold
    cart = services.add_item(ctx, product_id=1, quantity=2)
    assert cart.shipping.option.code == "standard"
    assert cart.shipping.option.is_free is True

    cart = services.clear(ctx)
    assert cart.shipping is None


def test_selection_dropped_when_option_becomes_unavailable(ctx, catalog):
    catalog.targets[(1, None)] = _target(1, price="100", stock="30", weight="3")
    services.add_item(ctx, product_id=1, quantity=1)
    services.select_shipping(ctx, destination=LIMA, option_code="express")

    cart = services.update_quantity(ctx, item_id="item_1", quantity=4)

    assert cart.shipping is None


def test_select_unknown_option(ctx):
    services.add_item(ctx, product_id=1, quantity=1)
    with pytest.raises(ShippingUnavailable):
        services.select_shipping(ctx, destination=LIMA, option_code="teleport")
