"""Catalog app models.

Products and their variants are the stock-bearing targets of the ledger.
Each row owns a ``stock`` counter written only by ``inventory.services``.
"""

from decimal import Decimal

from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Product(TimeStampedModel):
    """Core product entity; also a stock target when sold without variants."""

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    sku = models.CharField(max_length=64, unique=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    offer_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    weight = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True, help_text="kg per unit")
    stock = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(name="product_stock_non_negative", condition=models.Q(stock__gte=0)),
            models.CheckConstraint(name="product_price_non_negative", condition=models.Q(price__gte=0)),
            models.CheckConstraint(
                name="product_offer_le_price",
                condition=models.Q(offer_price__isnull=True) | models.Q(offer_price__lte=models.F("price")),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} [{self.sku}]"


class ProductVariant(TimeStampedModel):
    """Variant SKU under a product (e.g., size/color).

    Price, offer price and weight fall back to the parent product when unset.
    """

    product = models.ForeignKey(Product, related_name="variants", on_delete=models.CASCADE)
    sku = models.CharField(max_length=64, unique=True)
    label = models.CharField(max_length=120, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    offer_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    weight = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True)
    stock = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["sku"]
        constraints = [
            models.CheckConstraint(name="variant_stock_non_negative", condition=models.Q(stock__gte=0)),
            models.CheckConstraint(
                name="variant_price_non_negative",
                condition=models.Q(price__gte=0) | models.Q(price__isnull=True),
            ),
        ]
        indexes = [
            models.Index(fields=["product", "is_active"], name="catalog_pro_product_9c1d2e_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.product.name} [{self.sku}]"
