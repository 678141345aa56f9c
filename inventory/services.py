"""Inventory services (single-location): transactional stock movements."""

import logging
from decimal import Decimal
from typing import Optional

from catalog.models import Product, ProductVariant
from common.choices import MovementKind
from django.conf import settings
from django.db import connection, transaction
from django.shortcuts import get_object_or_404

from .calculator import compute
from .exceptions import InvalidQuantity, InvalidReason, MovementError, TargetInactive, TargetMismatch
from .models import LedgerEntry

logger = logging.getLogger("storefront.inventory")

CENTS = Decimal("0.01")
MAX_REASON_LENGTH = 500
MAX_REFERENCE_LENGTH = 100


def _bound_lock_wait() -> None:
    """Cap how long the row lock below may wait (PostgreSQL only)."""

    if connection.vendor != "postgresql":
        return
    timeout_ms = int(getattr(settings, "INVENTORY_LOCK_TIMEOUT_MS", 5000))
    with connection.cursor() as cursor:
        cursor.execute(f"SET LOCAL lock_timeout = '{timeout_ms}ms'")


def _check_precision(quantity) -> None:
    # Stock columns hold cents; finer quantities would not round-trip
    if isinstance(quantity, Decimal) and quantity.is_finite() and quantity != quantity.quantize(CENTS):
        raise InvalidQuantity("Quantity cannot have more than 2 decimal places")


def _clean_text(reason: str, reference: str) -> tuple[str, str]:
    reason = (reason or "").strip()
    reference = (reference or "").strip()
    if not reason:
        raise InvalidReason("Reason is required")
    if len(reason) > MAX_REASON_LENGTH:
        raise InvalidReason(f"Reason cannot exceed {MAX_REASON_LENGTH} characters")
    if len(reference) > MAX_REFERENCE_LENGTH:
        raise InvalidReason(f"Reference cannot exceed {MAX_REFERENCE_LENGTH} characters")
    return reason, reference


@transaction.atomic
def record_movement(
    *,
    product_id: int,
    kind: str,
    quantity: Decimal,
    reason: str,
    variant_id: Optional[int] = None,
    reference: str = "",
    actor=None,
) -> LedgerEntry:
    """Apply one movement to a product or variant and append it to the ledger.

    The target row stays locked from the stock read until the new stock and
    the ledger entry are written, so concurrent movements on the same target
    serialize. Any error rolls the whole unit back.
    """

    kind = MovementKind(kind)
    log_extra = {
        "event": "inventory.movement_rejected",
        "product_id": product_id,
        "variant_id": variant_id,
        "kind": str(kind),
        "quantity": str(quantity),
        "actor_id": getattr(actor, "id", None),
    }
    try:
        reason, reference = _clean_text(reason, reference)
        _check_precision(quantity)
        product = get_object_or_404(Product, id=product_id)
        if not product.is_active:
            raise TargetInactive("Product is not active")

        if variant_id is not None:
            variant = get_object_or_404(ProductVariant, id=variant_id)
            if variant.product_id != product.id:
                raise TargetMismatch("Variant does not belong to the given product")
            if not variant.is_active:
                raise TargetInactive("Variant is not available")
            _bound_lock_wait()
            target = ProductVariant.objects.select_for_update().get(id=variant.id)
        else:
            _bound_lock_wait()
            target = Product.objects.select_for_update().get(id=product.id)

        stock_before = target.stock
        transition = compute(stock_before, quantity, kind)
    except MovementError as exc:
        logger.warning("inventory.movement_rejected", extra={**log_extra, "code": exc.code, "detail": str(exc)})
        raise

    entry = LedgerEntry.objects.create(
        product=product,
        variant_id=variant_id,
        kind=kind,
        requested_quantity=quantity,
        stock_before=stock_before,
        stock_after=transition.new_stock,
        signed_quantity=transition.signed_quantity,
        reason=reason,
        reference=reference,
        actor=actor,
    )
    target.stock = transition.new_stock
    target.save(update_fields=["stock", "updated_at"])

    logger.info(
        "inventory.movement_recorded",
        extra={
            "event": "inventory.movement_recorded",
            "entry_id": entry.id,
            "product_id": product.id,
            "variant_id": variant_id,
            "kind": str(kind),
            "stock_before": str(stock_before),
            "stock_after": str(transition.new_stock),
            "signed_quantity": str(transition.signed_quantity),
            "actor_id": getattr(actor, "id", None),
        },
    )
    return entry


# EOF
