"""Shipping rate calculator.

Quotes the shipping options for a destination, a parcel weight and an order
value. Pure: thresholds and zones come from settings, never from I/O.

Prices depend on whether the destination is inside the metropolitan area
(department and province both equal ``SHIPPING_METRO_REGION``).
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings

ZERO = Decimal("0")

STANDARD = "standard"
EXPRESS = "express"
NATIONAL_EXPRESS = "national_express"
PREMIUM = "premium"

MAX_PREMIUM_WEIGHT = Decimal("10")
MAX_EXPRESS_WEIGHT = Decimal("8")


class ShippingUnavailable(Exception):
    code = "shipping_unavailable"


@dataclass(frozen=True)
class Destination:
    department: str
    province: str
    district: str = ""

    @classmethod
    def normalized(cls, department: str, province: str, district: str = "") -> "Destination":
        return cls(
            department=(department or "").strip().casefold(),
            province=(province or "").strip().casefold(),
            district=(district or "").strip().casefold(),
        )


@dataclass(frozen=True)
class ShippingOption:
    code: str
    name: str
    carrier: str
    base_price: Decimal
    price: Decimal
    free_from: Decimal
    is_free: bool
    missing_for_free: Decimal
    min_hours: int
    max_hours: int
    available: bool
    includes_insurance: bool
    message: str = ""


def _metro_region() -> str:
    return str(getattr(settings, "SHIPPING_METRO_REGION", "lima")).strip().casefold()


def _standard_free_from() -> Decimal:
    return Decimal(str(getattr(settings, "CART_FREE_SHIPPING_THRESHOLD", "150.00")))


def is_metropolitan(destination: Destination) -> bool:
    metro = _metro_region()
    return destination.department == metro and destination.province == metro


def coverage_gap(destination: Destination) -> Optional[str]:
    """Return a message when the destination is outside the serviced area."""

    zones = getattr(settings, "SHIPPING_UNSERVICED_ZONES", {})
    for department, provinces in zones.items():
        if destination.department != department.strip().casefold():
            continue
        if destination.province in {p.strip().casefold() for p in provinces}:
            return "Shipping is not available for this destination yet"
    return None


def _candidates(metro: bool, weight: Decimal) -> list[dict]:
    options = []
    if metro:
        options.append(
            {
                "code": STANDARD,
                "name": "Standard shipping",
                "carrier": "Courier Express",
                "base_price": Decimal("10") if weight <= 5 else Decimal("15"),
                "free_from": _standard_free_from(),
                "min_hours": 24,
                "max_hours": 48,
                "available": True,
                "includes_insurance": False,
            }
        )
        options.append(
            {
                "code": EXPRESS,
                "name": "Same-day express",
                "carrier": "Express Metro",
                "base_price": Decimal("25") if weight <= 3 else Decimal("35"),
                "free_from": Decimal("300"),
                "min_hours": 4,
                "max_hours": 8,
                "available": weight <= MAX_EXPRESS_WEIGHT,
                "includes_insurance": True,
            }
        )
    else:
        options.append(
            {
                "code": STANDARD,
                "name": "Standard shipping",
                "carrier": "Courier Express",
                "base_price": Decimal("20") if weight <= 5 else Decimal("30"),
                "free_from": _standard_free_from(),
                "min_hours": 72,
                "max_hours": 120,
                "available": True,
                "includes_insurance": False,
            }
        )
        options.append(
            {
                "code": NATIONAL_EXPRESS,
                "name": "National express",
                "carrier": "National Courier",
                "base_price": Decimal("35") if weight <= 5 else Decimal("50"),
                "free_from": Decimal("200"),
                "min_hours": 48,
                "max_hours": 72,
                "available": True,
                "includes_insurance": True,
            }
        )
    options.append(
        {
            "code": PREMIUM,
            "name": "Premium delivery",
            "carrier": "Premium Delivery",
            "base_price": Decimal("50") if metro else Decimal("80"),
            "free_from": Decimal("500"),
            "min_hours": 2 if metro else 24,
            "max_hours": 4 if metro else 48,
            "available": weight <= MAX_PREMIUM_WEIGHT,
            "includes_insurance": True,
        }
    )
    return options


def _price(candidate: dict, order_value: Decimal, free_shipping: bool, message: str) -> ShippingOption:
    free_from = candidate["free_from"]
    is_free = free_shipping or order_value >= free_from
    missing = ZERO if is_free else free_from - order_value
    return ShippingOption(
        base_price=candidate["base_price"],
        price=ZERO if is_free else candidate["base_price"],
        is_free=is_free,
        missing_for_free=missing.quantize(Decimal("0.01")),
        message=message,
        **{k: v for k, v in candidate.items() if k not in ("base_price",)},
    )


def quote_options(
    destination: Destination,
    total_weight: Decimal,
    order_value: Decimal,
    *,
    free_shipping: bool = False,
) -> list[ShippingOption]:
    """Ranked shipping options: available first, then cheapest, then fastest."""

    metro = is_metropolitan(destination)
    gap = coverage_gap(destination)
    quoted = []
    for candidate in _candidates(metro, total_weight):
        if gap:
            candidate["available"] = False
        quoted.append(_price(candidate, order_value, free_shipping, gap or ""))
    return sorted(quoted, key=lambda o: (not o.available, o.price, o.max_hours))


def pick_option(options: list[ShippingOption], code: str) -> ShippingOption:
    """Return the available option with ``code`` or raise ``ShippingUnavailable``."""

    for option in options:
        if option.code == code:
            if not option.available:
                raise ShippingUnavailable(option.message or f"Shipping option '{code}' is not available")
            return option
    raise ShippingUnavailable(f"Unknown shipping option '{code}'")
