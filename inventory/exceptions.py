"""Errors raised by the stock ledger.

All of them are logic errors: they are never retried and leave stock untouched.
"""


class MovementError(Exception):
    """Base class for rejected inventory movements."""

    code = "movement_error"


class InsufficientStock(MovementError):
    code = "insufficient_stock"


class InvalidQuantity(MovementError):
    code = "invalid_quantity"


class TargetInactive(MovementError):
    code = "target_inactive"


class TargetMismatch(MovementError):
    code = "target_mismatch"


class TargetNotFound(MovementError):
    code = "target_not_found"


class InvalidReason(MovementError):
    """Blank or over-long reason, or an over-long reference."""

    code = "invalid_reason"
