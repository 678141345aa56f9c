"""Stock transition calculator.

Maps (current stock, requested quantity, movement kind) to the next stock
level and the signed quantity recorded in the ledger. Pure: no I/O, no state.

Adjustment is the odd one out: its quantity is the desired absolute stock,
not a delta.
"""

from decimal import Decimal
from typing import NamedTuple

from common.choices import MovementKind

from .exceptions import InsufficientStock, InvalidQuantity

INCREASING_KINDS = frozenset({MovementKind.INFLOW, MovementKind.RELEASE})
DECREASING_KINDS = frozenset({MovementKind.OUTFLOW, MovementKind.RESERVE})


class StockTransition(NamedTuple):
    new_stock: Decimal
    signed_quantity: Decimal


def _require_decimal(name: str, value) -> Decimal:
    # bool is an int subclass; reject it along with floats and strings
    if isinstance(value, bool) or not isinstance(value, (Decimal, int)):
        raise InvalidQuantity(f"{name} must be a Decimal, got {type(value).__name__}")
    value = Decimal(value)
    if not value.is_finite():
        raise InvalidQuantity(f"{name} must be finite")
    return value


def compute(current_stock: Decimal, requested_quantity: Decimal, kind: MovementKind) -> StockTransition:
    """Return the transition for a movement, or raise if it is not allowed."""

    current = _require_decimal("current_stock", current_stock)
    requested = _require_decimal("requested_quantity", requested_quantity)
    kind = MovementKind(kind)

    if kind == MovementKind.ADJUSTMENT:
        if requested < 0:
            raise InvalidQuantity("Adjustment target cannot be negative")
        return StockTransition(new_stock=requested, signed_quantity=requested - current)

    if requested <= 0:
        raise InvalidQuantity("Quantity must be positive")

    if kind in INCREASING_KINDS:
        return StockTransition(new_stock=current + requested, signed_quantity=requested)

    if kind in DECREASING_KINDS:
        new_stock = current - requested
        if new_stock < 0:
            raise InsufficientStock(f"Insufficient stock. Current stock: {current}")
        return StockTransition(new_stock=new_stock, signed_quantity=-requested)

    raise InvalidQuantity(f"Unsupported movement kind: {kind}")  # pragma: no cover
