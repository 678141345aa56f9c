import threading
from decimal import Decimal
from typing import List

import pytest
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from common.choices import MovementKind
from django.db import close_old_connections, connection
from inventory.exceptions import InsufficientStock
from inventory.models import LedgerEntry
from inventory.services import record_movement


def _outflow_worker(barrier: threading.Barrier, product_id: int, qty: Decimal, ok: List, errors: List):
    # Ensure this thread uses its own DB connection
    close_old_connections()
    barrier.wait()
    try:
        record_movement(product_id=product_id, kind=MovementKind.OUTFLOW, quantity=qty, reason="concurrent sale")
        ok.append(qty)
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        close_old_connections()


@pytest.mark.django_db(transaction=True)
def test_concurrent_outflows_serialize_on_the_same_product():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    product = ProductFactory(stock=Decimal("10"))

    barrier = threading.Barrier(2)
    ok: List = []
    errors: List = []
    threads = [
        threading.Thread(target=_outflow_worker, args=(barrier, product.id, Decimal("3"), ok, errors)),
        threading.Thread(target=_outflow_worker, args=(barrier, product.id, Decimal("4"), ok, errors)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert Product.objects.get(id=product.id).stock == Decimal("3")
    entries = list(LedgerEntry.objects.filter(product_id=product.id).order_by("id"))
    assert len(entries) == 2
    assert entries[1].stock_before == entries[0].stock_after


@pytest.mark.django_db(transaction=True)
def test_concurrent_outflows_never_oversell():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    product = ProductFactory(stock=Decimal("5"))

    barrier = threading.Barrier(2)
    ok: List = []
    errors: List = []
    threads = [
        threading.Thread(target=_outflow_worker, args=(barrier, product.id, Decimal("4"), ok, errors))
        for _ in range(2)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(ok) == 1
    assert len(errors) == 1 and isinstance(errors[0], InsufficientStock)
    assert Product.objects.get(id=product.id).stock == Decimal("1")


def _movement_worker(barrier: threading.Barrier, product_id: int, kind: str, qty: Decimal, ok: List, errors: List):
    close_old_connections()
    barrier.wait()
    try:
        record_movement(product_id=product_id, kind=kind, quantity=qty, reason=f"concurrent {kind}")
        ok.append((kind, qty))
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        close_old_connections()


@pytest.mark.django_db(transaction=True)
def test_mixed_concurrent_movements_balance():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    initial = Decimal("50")
    product = ProductFactory(stock=initial)
    # Outflows total 24 so no interleaving can drive stock negative
    movements = [(MovementKind.INFLOW, Decimal("5"))] * 4 + [(MovementKind.OUTFLOW, Decimal("3"))] * 8

    barrier = threading.Barrier(len(movements))
    ok: List = []
    errors: List = []
    threads = [
        threading.Thread(target=_movement_worker, args=(barrier, product.id, kind, qty, ok, errors))
        for kind, qty in movements
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    inflow = sum((q for k, q in ok if k == MovementKind.INFLOW), Decimal("0"))
    outflow = sum((q for k, q in ok if k == MovementKind.OUTFLOW), Decimal("0"))
    assert Product.objects.get(id=product.id).stock == initial - outflow + inflow == Decimal("46")

    entries = list(LedgerEntry.objects.filter(product_id=product.id).order_by("id"))
    assert len(entries) == len(movements)
    assert entries[0].stock_before == initial
    for previous, current in zip(entries, entries[1:]):
        assert current.stock_before == previous.stock_after
    assert entries[-1].stock_after == Decimal("46")
