from decimal import Decimal
from types import SimpleNamespace

import pytest
from common.choices import MovementKind
from inventory.reports import summarize, top_entities


class _Actor(SimpleNamespace):
    def get_full_name(self):
        return self.full_name

    def get_username(self):
        return self.username


def _entry(kind, signed, product_id=1, actor=None):
    return SimpleNamespace(
        kind=kind,
        signed_quantity=Decimal(signed),
        product_id=product_id,
        product=SimpleNamespace(name=f"Product {product_id}"),
        actor_id=getattr(actor, "id", None),
        actor=actor,
    )


def test_summarize_reports_every_kind_even_when_empty():
    summary = summarize([])
    assert summary["total_movements"] == 0
    assert set(summary["by_kind"]) == {k.value for k in MovementKind}
    assert all(row["count"] == 0 for row in summary["by_kind"].values())


def test_summarize_counts_and_totals_per_kind():
    entries = [
        _entry(MovementKind.INFLOW, "10"),
        _entry(MovementKind.INFLOW, "5"),
        _entry(MovementKind.OUTFLOW, "-3"),
        _entry(MovementKind.ADJUSTMENT, "-2"),
        _entry(MovementKind.ADJUSTMENT, "4"),
    ]
    summary = summarize(entries)

    assert summary["total_movements"] == 5
    assert summary["by_kind"]["inflow"] == {"count": 2, "signed_total": Decimal("15"), "units": Decimal("15")}
    assert summary["by_kind"]["outflow"]["signed_total"] == Decimal("-3")
    assert summary["by_kind"]["outflow"]["units"] == Decimal("3")
    assert summary["by_kind"]["adjustment"]["signed_total"] == Decimal("2")
    assert summary["by_kind"]["adjustment"]["units"] == Decimal("6")


def test_summarize_accepts_a_generator():
    summary = summarize(_entry(MovementKind.RESERVE, "-1") for _ in range(3))
    assert summary["by_kind"]["reserve"]["count"] == 3


def test_top_products_ranked_by_count_then_quantity_then_id():
    entries = [
        _entry(MovementKind.INFLOW, "1", product_id=3),
        _entry(MovementKind.INFLOW, "1", product_id=3),
        _entry(MovementKind.INFLOW, "50", product_id=2),
        _entry(MovementKind.OUTFLOW, "-7", product_id=1),
        _entry(MovementKind.OUTFLOW, "-7", product_id=4),
    ]
    rows = top_entities(entries, by="product", limit=10)

    assert [r["id"] for r in rows] == [3, 2, 1, 4]
    assert rows[0]["total_movements"] == 2
    assert rows[0]["total_quantity"] == Decimal("2")
    assert rows[1]["label"] == "Product 2"


def test_top_entities_respects_limit():
    entries = [_entry(MovementKind.INFLOW, "1", product_id=i) for i in range(1, 6)]
    assert len(top_entities(entries, by="product", limit=2)) == 2
    assert top_entities(entries, by="product", limit=0) == []


def test_top_actors_label_system_for_missing_actor():
    ana = _Actor(id=7, full_name="Ana Ruiz", username="ana")
    bot = _Actor(id=8, full_name="", username="importer")
    entries = [
        _entry(MovementKind.INFLOW, "1", actor=ana),
        _entry(MovementKind.INFLOW, "1", actor=ana),
        _entry(MovementKind.INFLOW, "1", actor=bot),
        _entry(MovementKind.INFLOW, "1", actor=None),
    ]
    rows = top_entities(entries, by="actor")

    assert [(r["id"], r["label"]) for r in rows] == [(7, "Ana Ruiz"), (8, "importer"), (None, "system")]


def test_top_entities_rejects_unknown_grouping():
    with pytest.raises(ValueError):
        top_entities([], by="warehouse")
