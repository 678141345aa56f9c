"""Cart mutation errors.

Stock and coupon failures keep their own types (``inventory.exceptions`` and
``coupons.exceptions``); these cover the cart's own state machine.
"""


class CartError(Exception):
    """Raised for cart mutation failures."""

    code = "cart_error"


class ItemNotFound(CartError):
    code = "item_not_found"


class OutOfRange(CartError):
    """Quantity or number of lines beyond the configured maximum."""

    code = "out_of_range"


class CartEmpty(CartError):
    code = "cart_empty"
