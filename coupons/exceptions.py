"""Coupon errors surfaced by the evaluator and cart operations."""


class CouponError(Exception):
    code = "coupon_error"


class CouponInvalid(CouponError):
    """Coupon is unknown, inactive, expired or below its minimum amount."""

    code = "coupon_invalid"


class CouponAlreadyApplied(CouponError):
    code = "coupon_already_applied"
