"""DRF views for cart operations.

Carts are keyed by ``user:<id>`` for authenticated requests and by
``guest:<id>`` otherwise, where the guest id comes from the ``X-Session-Id``
header or the Django session.
"""

from coupons.exceptions import CouponError
from django.conf import settings
from django.utils import timezone
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from inventory.exceptions import MovementError, TargetNotFound
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from shipping.rates import ShippingUnavailable

from .exceptions import CartError, ItemNotFound
from .pricing import pricing_rules_from_settings
from .serializers import (
    AddItemSerializer,
    CartReadSerializer,
    CouponCodeSerializer,
    DestinationSerializer,
    SelectShippingSerializer,
    ShippingOptionSerializer,
    UpdateItemQuantitySerializer,
)
from .services import (
    CartContext,
    apply_coupon,
    clear,
    get_cart,
    quote_shipping,
    reconcile_availability,
    remove_coupon,
    remove_item,
)
from .store import CacheCartStore

CART_ERRORS = (CartError, CouponError, MovementError, ShippingUnavailable)

ErrorSerializer = inline_serializer(
    name="CartError",
    fields={"detail": rf_serializers.CharField(), "code": rf_serializers.CharField()},
)

SESSION_HEADER = OpenApiParameter(
    name="X-Session-Id",
    location=OpenApiParameter.HEADER,
    required=False,
    description="Guest cart identifier for clients without a session cookie",
    type=str,
)

CART_EXAMPLE = OpenApiExample(
    "Cart",
    value={
        "items": [
            {
                "item_id": "item_12",
                "product_id": 12,
                "variant_id": None,
                "name": "Desk lamp",
                "sku": "LAMP-01",
                "unit_price": "100.00",
                "offer_price": "80.00",
                "quantity": 2,
                "weight_per_unit": "0.500",
                "available_stock": "10.00",
                "line_subtotal": "160.00",
            }
        ],
        "coupon": None,
        "summary": {
            "item_count": 1,
            "subtotal": "160.00",
            "discount_total": "40.00",
            "tax_base": "160.00",
            "tax": "28.80",
            "shipping_cost": "0.00",
            "free_shipping_eligible": True,
            "grand_total": "188.80",
            "total_weight": "1.00",
        },
        "shipping": None,
        "synced": False,
    },
)


def cart_session_key(request) -> str:
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return f"user:{user.id}"
    guest_id = request.headers.get("X-Session-Id")
    if not guest_id:
        if not request.session.session_key:
            request.session.create()
        guest_id = request.session.session_key
    return f"guest:{guest_id}"


def cart_context(request) -> CartContext:
    return CartContext(
        session_key=cart_session_key(request),
        store=CacheCartStore(),
        now=timezone.now(),
        rules=pricing_rules_from_settings(),
    )


def error_response(exc: Exception) -> Response:
    code = getattr(exc, "code", "cart_error")
    http_status = status.HTTP_404_NOT_FOUND if isinstance(exc, (ItemNotFound, TargetNotFound)) else 400
    return Response({"detail": str(exc), "code": code}, status=http_status)


def cart_response(cart, http_status=status.HTTP_200_OK) -> Response:
    return Response(CartReadSerializer(cart).data, status=http_status)


class CartBaseView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart_write"


class CartDetailView(CartBaseView):
    """Return the current cart."""

    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get cart",
        description="Returns the cart for the current user or guest session with a freshly computed summary.",
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer},
        examples=[CART_EXAMPLE],
    )
    def get(self, request):
        return cart_response(get_cart(cart_context(request)))


class CartAddItemView(CartBaseView):
    """Add a product or variant to the cart."""

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Add item to cart",
        description="Adds a product (or one of its variants). Adding the same target again increases its quantity.",
        parameters=[SESSION_HEADER],
        request=AddItemSerializer,
        responses={201: CartReadSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        examples=[
            OpenApiExample("Add", value={"product_id": 12, "variant_id": None, "quantity": 2}, request_only=True),
            OpenApiExample(
                "Insufficient stock",
                value={"detail": "Insufficient stock. Current stock: 1.00", "code": "insufficient_stock"},
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request):
        serializer = AddItemSerializer(data=request.data, context={"cart_context": cart_context(request)})
        serializer.is_valid(raise_exception=True)
        try:
            cart = serializer.save()
        except CART_ERRORS as exc:
            return error_response(exc)
        return cart_response(cart, status.HTTP_201_CREATED)


class CartItemView(CartBaseView):
    """Update or remove a single cart line."""

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Update cart item quantity",
        description="Sets the quantity of a line. A quantity of zero or less removes the line.",
        parameters=[SESSION_HEADER],
        request=UpdateItemQuantitySerializer,
        responses={200: CartReadSerializer, 400: ErrorSerializer, 404: ErrorSerializer},
        examples=[OpenApiExample("Update", value={"quantity": 3}, request_only=True)],
    )
    def patch(self, request, item_id: str):
        serializer = UpdateItemQuantitySerializer(
            instance=item_id, data=request.data, context={"cart_context": cart_context(request)}
        )
        serializer.is_valid(raise_exception=True)
        try:
            cart = serializer.save()
        except CART_ERRORS as exc:
            return error_response(exc)
        return cart_response(cart)

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Delete cart item",
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer, 404: ErrorSerializer},
    )
    def delete(self, request, item_id: str):
        try:
            cart = remove_item(cart_context(request), item_id=item_id)
        except CART_ERRORS as exc:
            return error_response(exc)
        return cart_response(cart)


class CartClearView(CartBaseView):
    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Clear cart",
        description="Removes every line, the applied coupon and the shipping selection.",
        parameters=[SESSION_HEADER],
        request=None,
        responses={200: CartReadSerializer},
    )
    def post(self, request):
        return cart_response(clear(cart_context(request)))


class CartCouponView(CartBaseView):
    """Apply or remove the cart's coupon."""

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Apply coupon",
        description="Applies a coupon code. Only one coupon may be applied at a time.",
        parameters=[SESSION_HEADER],
        request=CouponCodeSerializer,
        responses={200: CartReadSerializer, 400: ErrorSerializer},
        examples=[
            OpenApiExample("Apply", value={"code": "WELCOME10"}, request_only=True),
            OpenApiExample(
                "Already applied",
                value={
                    "detail": "Coupon WELCOME10 is already applied. Remove it first.",
                    "code": "coupon_already_applied",
                },
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request):
        serializer = CouponCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            cart = apply_coupon(cart_context(request), code=serializer.validated_data["code"])
        except CART_ERRORS as exc:
            return error_response(exc)
        return cart_response(cart)

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Remove coupon",
        parameters=[SESSION_HEADER],
        request=CouponCodeSerializer,
        responses={200: CartReadSerializer, 400: ErrorSerializer},
    )
    def delete(self, request):
        serializer = CouponCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            cart = remove_coupon(cart_context(request), code=serializer.validated_data["code"])
        except CART_ERRORS as exc:
            return error_response(exc)
        return cart_response(cart)


class CartReconcileView(CartBaseView):
    """Re-check stock for every line."""

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Reconcile availability",
        description=(
            "Drops lines whose product is inactive or out of stock and lowers quantities that exceed the "
            "stock left. Returns the affected item ids."
        ),
        parameters=[SESSION_HEADER],
        request=None,
        responses={
            200: inline_serializer(
                name="CartReconcileResponse",
                fields={
                    "cart": CartReadSerializer(),
                    "items_changed": rf_serializers.ListField(child=rf_serializers.CharField()),
                    "items_without_stock": rf_serializers.ListField(child=rf_serializers.CharField()),
                },
            )
        },
    )
    def post(self, request):
        result = reconcile_availability(cart_context(request))
        return Response(
            {
                "cart": CartReadSerializer(result.cart).data,
                "items_changed": [item.item_id for item in result.items_changed],
                "items_without_stock": [item.item_id for item in result.items_without_stock],
            },
            status=status.HTTP_200_OK,
        )


class CartShippingQuoteView(CartBaseView):
    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Quote shipping",
        description="Lists shipping options for a destination, available and cheapest first.",
        parameters=[SESSION_HEADER],
        request=DestinationSerializer,
        responses={200: ShippingOptionSerializer(many=True), 400: ErrorSerializer},
        examples=[OpenApiExample("Lima", value={"department": "Lima", "province": "Lima"}, request_only=True)],
    )
    def post(self, request):
        serializer = DestinationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            options = quote_shipping(cart_context(request), destination=serializer.to_destination())
        except CART_ERRORS as exc:
            return error_response(exc)
        return Response(ShippingOptionSerializer(options, many=True).data, status=status.HTTP_200_OK)


class CartShippingSelectView(CartBaseView):
    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Select shipping option",
        parameters=[SESSION_HEADER],
        request=SelectShippingSerializer,
        responses={200: CartReadSerializer, 400: ErrorSerializer},
        examples=[
            OpenApiExample(
                "Select",
                value={"department": "Lima", "province": "Lima", "option": "express"},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = SelectShippingSerializer(data=request.data, context={"cart_context": cart_context(request)})
        serializer.is_valid(raise_exception=True)
        try:
            cart = serializer.save()
        except CART_ERRORS as exc:
            return error_response(exc)
        return cart_response(cart)


class CartConfigView(APIView):
    """Public cart limits and pricing rules."""

    permission_classes = [AllowAny]
    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Cart configuration",
        responses={
            200: inline_serializer(
                name="CartConfigResponse",
                fields={
                    "ttl_seconds": rf_serializers.IntegerField(),
                    "max_quantity_per_item": rf_serializers.IntegerField(),
                    "max_items": rf_serializers.IntegerField(),
                    "tax_rate": rf_serializers.DecimalField(max_digits=5, decimal_places=4),
                    "free_shipping_threshold": rf_serializers.DecimalField(max_digits=12, decimal_places=2),
                },
            )
        },
    )
    def get(self, request):
        rules = pricing_rules_from_settings()
        return Response(
            {
                "ttl_seconds": int(getattr(settings, "CART_TTL_SECONDS", 7200)),
                "max_quantity_per_item": int(getattr(settings, "CART_MAX_QUANTITY_PER_ITEM", 99)),
                "max_items": int(getattr(settings, "CART_MAX_ITEMS", 50)),
                "tax_rate": str(rules.tax_rate),
                "free_shipping_threshold": str(rules.free_shipping_threshold),
            },
            status=status.HTTP_200_OK,
        )
