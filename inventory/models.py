"""Inventory models (single-location, append-only ledger).

Every accepted stock change produces exactly one ``LedgerEntry``. Entries are
never updated or deleted; corrections are new movements.
"""

from decimal import Decimal

from common.choices import MovementKind
from django.conf import settings
from django.db import models


class ImmutableEntryError(Exception):
    """Raised on any attempt to modify or delete a ledger entry."""

    code = "immutable_entry"


class UnbalancedEntryError(Exception):
    """Raised when stock_after differs from stock_before + signed_quantity."""

    code = "unbalanced_entry"


class LedgerEntryQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise ImmutableEntryError("Ledger entries cannot be updated")

    def delete(self):
        raise ImmutableEntryError("Ledger entries cannot be deleted")


class LedgerEntry(models.Model):
    KIND_CHOICES = MovementKind.choices

    product = models.ForeignKey("catalog.Product", related_name="ledger_entries", on_delete=models.PROTECT)
    variant = models.ForeignKey(
        "catalog.ProductVariant", null=True, blank=True, related_name="ledger_entries", on_delete=models.PROTECT
    )
    kind = models.CharField(max_length=16, choices=KIND_CHOICES, db_index=True)
    # For adjustments this is the requested absolute stock, otherwise a positive delta
    requested_quantity = models.DecimalField(max_digits=12, decimal_places=2)
    stock_before = models.DecimalField(max_digits=12, decimal_places=2)
    stock_after = models.DecimalField(max_digits=12, decimal_places=2)
    signed_quantity = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.CharField(max_length=500)
    reference = models.CharField(max_length=100, blank=True)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="ledger_entries",
        on_delete=models.PROTECT,
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = LedgerEntryQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "ledger entries"
        constraints = [
            models.CheckConstraint(name="ledger_stock_after_non_negative", condition=models.Q(stock_after__gte=0)),
            models.CheckConstraint(name="ledger_reason_not_blank", condition=~models.Q(reason="")),
        ]
        indexes = [
            models.Index(fields=["product", "created_at"], name="inventory_l_product_4b8e1a_idx"),
            models.Index(fields=["variant", "created_at"], name="inventory_l_variant_7f2c3d_idx"),
            models.Index(fields=["actor", "created_at"], name="inventory_l_actor_i_1e9a5b_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        target = f"{self.product_id}/{self.variant_id}" if self.variant_id else f"{self.product_id}"
        return f"{self.kind} {self.signed_quantity} for {target}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise ImmutableEntryError("Ledger entries cannot be updated")
        # Checked here with exact Decimals; SQLite stores these columns as REAL
        before, delta, after = (Decimal(str(v)) for v in (self.stock_before, self.signed_quantity, self.stock_after))
        if before + delta != after:
            raise UnbalancedEntryError(f"Unbalanced entry: {before} + {delta} != {after}")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableEntryError("Ledger entries cannot be deleted")


# EOF
