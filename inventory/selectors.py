"""Selectors for the inventory ledger (read-only)."""

from datetime import date, datetime, time, timedelta
from typing import Optional

from django.db.models import QuerySet
from django.utils import timezone

from .models import LedgerEntry


def _day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    tz = timezone.get_current_timezone()
    return (
        datetime.combine(start, time.min, tzinfo=tz),
        datetime.combine(end, time.max, tzinfo=tz),
    )


def ledger_entries() -> QuerySet[LedgerEntry]:
    return LedgerEntry.objects.select_related("product", "variant", "actor")


def entries_between(
    start: date,
    end: date,
    *,
    product_id: Optional[int] = None,
    variant_id: Optional[int] = None,
    kind: Optional[str] = None,
    actor_id: Optional[int] = None,
) -> QuerySet[LedgerEntry]:
    """Entries created between two calendar days, both inclusive."""

    lower, upper = _day_bounds(start, end)
    qs = ledger_entries().filter(created_at__gte=lower, created_at__lte=upper)
    if product_id:
        qs = qs.filter(product_id=product_id)
    if variant_id:
        qs = qs.filter(variant_id=variant_id)
    if kind:
        qs = qs.filter(kind=kind)
    if actor_id:
        qs = qs.filter(actor_id=actor_id)
    return qs.order_by("-created_at", "-id")


def recent_entries(days: int, *, product_id: Optional[int] = None) -> QuerySet[LedgerEntry]:
    """Entries since the start of the day ``days`` days ago."""

    since = timezone.localtime() - timedelta(days=days)
    since = since.replace(hour=0, minute=0, second=0, microsecond=0)
    qs = ledger_entries().filter(created_at__gte=since)
    if product_id:
        qs = qs.filter(product_id=product_id)
    return qs


# EOF
