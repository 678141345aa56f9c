"""Cart serializers for read and write operations."""

from common.choices import CouponKind
from rest_framework import serializers
from shipping.rates import Destination

from .services import add_item, select_shipping, update_quantity

MONEY = {"max_digits": 12, "decimal_places": 2}


class CartLineItemReadSerializer(serializers.Serializer):
    """Read serializer for a cart line item."""

    item_id = serializers.CharField()
    product_id = serializers.IntegerField()
    variant_id = serializers.IntegerField(allow_null=True)
    name = serializers.CharField()
    sku = serializers.CharField()
    unit_price = serializers.DecimalField(**MONEY)
    offer_price = serializers.DecimalField(allow_null=True, **MONEY)
    quantity = serializers.IntegerField()
    weight_per_unit = serializers.DecimalField(max_digits=8, decimal_places=3)
    available_stock = serializers.DecimalField(**MONEY)
    line_subtotal = serializers.DecimalField(**MONEY)
    created_at = serializers.DateTimeField()
    modified_at = serializers.DateTimeField()


class DiscountLineSerializer(serializers.Serializer):
    source = serializers.CharField()
    description = serializers.CharField()
    amount = serializers.DecimalField(**MONEY)
    percentage = serializers.DecimalField(max_digits=6, decimal_places=2, allow_null=True)
    code = serializers.CharField(allow_blank=True)
    item_id = serializers.CharField(allow_blank=True)


class CartSummarySerializer(serializers.Serializer):
    item_count = serializers.IntegerField()
    subtotal = serializers.DecimalField(**MONEY)
    discount_total = serializers.DecimalField(**MONEY)
    discounts = DiscountLineSerializer(many=True)
    tax_base = serializers.DecimalField(**MONEY)
    tax = serializers.DecimalField(**MONEY)
    shipping_cost = serializers.DecimalField(**MONEY)
    free_shipping_eligible = serializers.BooleanField()
    grand_total = serializers.DecimalField(**MONEY)
    total_weight = serializers.DecimalField(**MONEY)


class AppliedCouponSerializer(serializers.Serializer):
    code = serializers.CharField()
    kind = serializers.ChoiceField(choices=CouponKind.choices)
    value = serializers.DecimalField(**MONEY)
    description = serializers.CharField(allow_blank=True)
    ends_at = serializers.DateTimeField()


class DestinationSerializer(serializers.Serializer):
    """Shipping destination; values are matched case-insensitively."""

    department = serializers.CharField(max_length=100)
    province = serializers.CharField(max_length=100)
    district = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")

    def to_destination(self) -> Destination:
        data = self.validated_data
        return Destination.normalized(data["department"], data["province"], data.get("district", ""))


class ShippingOptionSerializer(serializers.Serializer):
    code = serializers.CharField()
    name = serializers.CharField()
    carrier = serializers.CharField()
    base_price = serializers.DecimalField(**MONEY)
    price = serializers.DecimalField(**MONEY)
    is_free = serializers.BooleanField()
    free_from = serializers.DecimalField(**MONEY)
    missing_for_free = serializers.DecimalField(**MONEY)
    min_hours = serializers.IntegerField()
    max_hours = serializers.IntegerField()
    available = serializers.BooleanField()
    includes_insurance = serializers.BooleanField()
    message = serializers.CharField(allow_blank=True)


class ShippingSelectionSerializer(serializers.Serializer):
    destination = DestinationSerializer()
    option = ShippingOptionSerializer()
    selected_at = serializers.DateTimeField()


class CartReadSerializer(serializers.Serializer):
    """Read serializer for the cart, its items and summary."""

    items = CartLineItemReadSerializer(many=True)
    coupon = AppliedCouponSerializer(allow_null=True)
    summary = CartSummarySerializer()
    shipping = ShippingSelectionSerializer(allow_null=True)
    synced = serializers.BooleanField()
    created_at = serializers.DateTimeField()
    saved_at = serializers.DateTimeField()


class AddItemSerializer(serializers.Serializer):
    """Write serializer for adding an item to the cart."""

    product_id = serializers.IntegerField()
    variant_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    quantity = serializers.IntegerField(min_value=1, default=1)

    def create(self, validated_data):  # type: ignore[override]
        return add_item(self.context["cart_context"], **validated_data)


class UpdateItemQuantitySerializer(serializers.Serializer):
    """Write serializer for a line quantity; zero removes the line."""

    quantity = serializers.IntegerField()

    def update(self, instance, validated_data):  # type: ignore[override]
        return update_quantity(self.context["cart_context"], item_id=instance, quantity=validated_data["quantity"])


class CouponCodeSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=40, trim_whitespace=True)


class SelectShippingSerializer(DestinationSerializer):
    option = serializers.CharField(max_length=32)

    def create(self, validated_data):  # type: ignore[override]
        return select_shipping(
            self.context["cart_context"],
            destination=self.to_destination(),
            option_code=validated_data["option"],
        )
