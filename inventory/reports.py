"""Pure reducers over already-fetched ledger entries.

Callers load entries (see ``selectors``) and pass them in; nothing here
queries the database beyond relations the caller preloaded.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from common.choices import MovementKind

TOP_BY_PRODUCT = "product"
TOP_BY_ACTOR = "actor"


def summarize(entries: Iterable) -> dict:
    """Count entries and total their signed quantities per movement kind.

    ``units`` is the absolute volume moved, so outflows read as positive.
    """

    by_kind = {kind.value: {"count": 0, "signed_total": Decimal("0"), "units": Decimal("0")} for kind in MovementKind}
    total = 0
    for entry in entries:
        bucket = by_kind[MovementKind(entry.kind).value]
        bucket["count"] += 1
        bucket["signed_total"] += entry.signed_quantity
        bucket["units"] += abs(entry.signed_quantity)
        total += 1
    return {"total_movements": total, "by_kind": by_kind}


def _product_label(entry) -> str:
    product = getattr(entry, "product", None)
    return getattr(product, "name", "") if product is not None else ""


def _actor_label(entry) -> str:
    actor = getattr(entry, "actor", None)
    if actor is None:
        return "system"
    return actor.get_full_name() or actor.get_username()


def top_entities(entries: Iterable, by: str = TOP_BY_PRODUCT, limit: int = 10) -> list[dict]:
    """Rank products or actors by how many ledger entries reference them."""

    if by == TOP_BY_PRODUCT:
        key_of, label_of = (lambda e: e.product_id), _product_label
    elif by == TOP_BY_ACTOR:
        key_of, label_of = (lambda e: e.actor_id), _actor_label
    else:
        raise ValueError(f"Unsupported grouping: {by}")

    groups: dict = defaultdict(lambda: {"total_movements": 0, "total_quantity": Decimal("0"), "label": ""})
    for entry in entries:
        row = groups[key_of(entry)]
        row["total_movements"] += 1
        row["total_quantity"] += abs(entry.signed_quantity)
        if not row["label"]:
            row["label"] = label_of(entry)

    ranked = sorted(
        groups.items(),
        # None ids (system actor) sort after real ids on ties
        key=lambda kv: (-kv[1]["total_movements"], -kv[1]["total_quantity"], kv[0] is None, kv[0] or 0),
    )
    return [{"id": key, **row} for key, row in ranked[: max(limit, 0)]]


# EOF
