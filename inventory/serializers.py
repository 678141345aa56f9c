"""Serializers for the inventory ledger.

Entries are read-only; new movements go through ``MovementCreateSerializer``
which delegates to ``services.record_movement``.
"""

from common.choices import MovementKind
from rest_framework import serializers

from .models import LedgerEntry
from .services import record_movement


class LedgerEntrySerializer(serializers.ModelSerializer):
    """Read-only representation of a ledger entry."""

    product_name = serializers.CharField(source="product.name", read_only=True)
    variant_sku = serializers.CharField(source="variant.sku", read_only=True, default=None)
    actor_username = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "product",
            "product_name",
            "variant",
            "variant_sku",
            "kind",
            "requested_quantity",
            "stock_before",
            "stock_after",
            "signed_quantity",
            "reason",
            "reference",
            "actor",
            "actor_username",
            "created_at",
        ]
        read_only_fields = fields

    def get_actor_username(self, obj) -> str | None:
        return obj.actor.get_username() if obj.actor_id else None


class MovementCreateSerializer(serializers.Serializer):
    """Write serializer for recording one stock movement."""

    product_id = serializers.IntegerField()
    variant_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    kind = serializers.ChoiceField(choices=MovementKind.choices)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    reason = serializers.CharField(max_length=500, trim_whitespace=True)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")

    def create(self, validated_data):  # type: ignore[override]
        actor = self.context["request"].user
        return record_movement(actor=actor, **validated_data)


class ReportQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()
    product = serializers.IntegerField(required=False)
    variant = serializers.IntegerField(required=False)
    kind = serializers.ChoiceField(choices=MovementKind.choices, required=False)
    actor = serializers.IntegerField(required=False)
    include_entries = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if attrs["end"] < attrs["start"]:
            raise serializers.ValidationError({"end": "End date must not be before start date."})
        return attrs


class StatisticsQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=1, max_value=365, required=False, default=30)
    product = serializers.IntegerField(required=False)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=10)


# EOF
