from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory, ProductVariantFactory, UserFactory
from coupons.tests.factories import CouponFactory
from rest_framework.test import APIClient

CART = "/api/v1/cart/"


def _guest(session_id="guest-1"):
    client = APIClient()
    client.credentials(HTTP_X_SESSION_ID=session_id)
    return client


@pytest.mark.django_db
def test_empty_cart_for_new_guest():
    resp = _guest().get(CART)

    assert resp.status_code == 200
    body = resp.json()
    assert body["items"] == []
    assert body["summary"]["grand_total"] == "0.00"
    assert body["coupon"] is None


@pytest.mark.django_db
def test_add_item_and_summary():
    product = ProductFactory(price=Decimal("100"), offer_price=Decimal("80"), stock=Decimal("5"))
    client = _guest()

    resp = client.post(f"{CART}items/", {"product_id": product.id, "quantity": 2}, format="json")

    assert resp.status_code == 201
    summary = resp.json()["summary"]
    assert summary["subtotal"] == "160.00"
    assert summary["discount_total"] == "40.00"
    assert summary["tax"] == "28.80"
    assert summary["grand_total"] == "188.80"
    assert summary["free_shipping_eligible"] is True
    assert resp.json()["items"][0]["item_id"] == f"item_{product.id}"


@pytest.mark.django_db
def test_guest_carts_are_isolated():
    product = ProductFactory()
    _guest("a").post(f"{CART}items/", {"product_id": product.id}, format="json")

    assert _guest("b").get(CART).json()["items"] == []
    assert len(_guest("a").get(CART).json()["items"]) == 1


@pytest.mark.django_db
def test_session_cookie_identifies_guest_without_header():
    product = ProductFactory()
    client = APIClient()

    client.post(f"{CART}items/", {"product_id": product.id}, format="json")

    assert len(client.get(CART).json()["items"]) == 1


@pytest.mark.django_db
def test_authenticated_cart_follows_user():
    product = ProductFactory()
    user = UserFactory()
    first, second = APIClient(), APIClient()
    first.force_authenticate(user=user)
    second.force_authenticate(user=user)

    first.post(f"{CART}items/", {"product_id": product.id}, format="json")

    assert len(second.get(CART).json()["items"]) == 1


@pytest.mark.django_db
def test_add_item_errors():
    product = ProductFactory(stock=Decimal("1"))
    inactive = ProductFactory(is_active=False)
    foreign = ProductVariantFactory()
    client = _guest()

    resp = client.post(f"{CART}items/", {"product_id": product.id, "quantity": 2}, format="json")
    assert resp.status_code == 400
    assert resp.json()["code"] == "insufficient_stock"

    resp = client.post(f"{CART}items/", {"product_id": 999999}, format="json")
    assert resp.status_code == 404
    assert resp.json()["code"] == "target_not_found"

    resp = client.post(f"{CART}items/", {"product_id": inactive.id}, format="json")
    assert resp.json()["code"] == "target_inactive"

    resp = client.post(f"{CART}items/", {"product_id": product.id, "variant_id": foreign.id}, format="json")
    assert resp.json()["code"] == "target_mismatch"

    resp = client.post(f"{CART}items/", {"product_id": product.id, "quantity": 0}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_update_and_delete_item():
    product = ProductFactory(stock=Decimal("10"))
    client = _guest()
    client.post(f"{CART}items/", {"product_id": product.id}, format="json")
    item_url = f"{CART}items/item_{product.id}/"

    resp = client.patch(item_url, {"quantity": 4}, format="json")
    assert resp.status_code == 200
    assert resp.json()["items"][0]["quantity"] == 4

    resp = client.delete(item_url)
    assert resp.status_code == 200
    assert resp.json()["items"] == []

    resp = client.delete(item_url)
    assert resp.status_code == 404
    assert resp.json()["code"] == "item_not_found"


@pytest.mark.django_db
def test_coupon_endpoints():
    product = ProductFactory(price=Decimal("100"), stock=Decimal("10"))
    CouponFactory(code="WELCOME10")
    client = _guest()
    client.post(f"{CART}items/", {"product_id": product.id}, format="json")

    resp = client.post(f"{CART}coupon/", {"code": "welcome10"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["coupon"]["code"] == "WELCOME10"
    assert resp.json()["summary"]["tax_base"] == "90.00"

    resp = client.post(f"{CART}coupon/", {"code": "WELCOME10"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["code"] == "coupon_already_applied"

    resp = client.delete(f"{CART}coupon/", {"code": "WELCOME10"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["coupon"] is None

    resp = client.post(f"{CART}coupon/", {"code": "UNKNOWN"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["code"] == "coupon_invalid"


@pytest.mark.django_db
def test_clear_cart():
    product = ProductFactory()
    client = _guest()
    client.post(f"{CART}items/", {"product_id": product.id}, format="json")

    resp = client.post(f"{CART}clear/")

    assert resp.status_code == 200
    assert resp.json()["items"] == []


@pytest.mark.django_db
def test_reconcile_after_stock_drop():
    product = ProductFactory(stock=Decimal("5"))
    gone = ProductFactory(stock=Decimal("5"))
    client = _guest()
    client.post(f"{CART}items/", {"product_id": product.id, "quantity": 4}, format="json")
    client.post(f"{CART}items/", {"product_id": gone.id, "quantity": 1}, format="json")

    type(product).objects.filter(id=product.id).update(stock=Decimal("2"))
    type(gone).objects.filter(id=gone.id).update(is_active=False)

    resp = client.post(f"{CART}reconcile/")

    assert resp.status_code == 200
    body = resp.json()
    assert body["items_changed"] == [f"item_{product.id}"]
    assert body["items_without_stock"] == [f"item_{gone.id}"]
    assert body["cart"]["items"][0]["quantity"] == 2
    assert body["cart"]["synced"] is True


@pytest.mark.django_db
def test_shipping_quote_and_select():
    product = ProductFactory(price=Decimal("50"), weight=Decimal("1.000"))
    client = _guest()

    resp = client.post(f"{CART}shipping/quote/", {"department": "Lima", "province": "Lima"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["code"] == "cart_empty"

    client.post(f"{CART}items/", {"product_id": product.id}, format="json")
    resp = client.post(f"{CART}shipping/quote/", {"department": "Lima", "province": "Lima"}, format="json")
    assert resp.status_code == 200
    assert resp.json()[0]["code"] == "standard"
    assert resp.json()[0]["price"] == "10.00"

    resp = client.post(
        f"{CART}shipping/select/", {"department": "Lima", "province": "Lima", "option": "express"}, format="json"
    )
    assert resp.status_code == 200
    assert resp.json()["shipping"]["option"]["code"] == "express"

    resp = client.post(
        f"{CART}shipping/select/", {"department": "Lima", "province": "Lima", "option": "drone"}, format="json"
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "shipping_unavailable"


@pytest.mark.django_db
def test_cart_config():
    resp = APIClient().get(f"{CART}config/")

    assert resp.status_code == 200
    assert resp.json()["max_quantity_per_item"] == 99
    assert resp.json()["tax_rate"] == "0.18"
