import uuid
from datetime import datetime
from decimal import Decimal

from builders import make_structure
from feedesk.billing.fee_structures import base_fee_of, component_total, resolve_fee_structure

CLASS_A = uuid.uuid4()
CLASS_B = uuid.uuid4()
QUARTER = uuid.uuid4()


def test_resolves_structure_for_class_and_quarter():
    mine = make_structure(CLASS_A, QUARTER, total="5000")
    other_class = make_structure(CLASS_B, QUARTER, total="7000")
    other_quarter = make_structure(CLASS_A, uuid.uuid4(), total="9000")

    found = resolve_fee_structure(CLASS_A, QUARTER, [other_class, other_quarter, mine])

    assert found is mine
    assert base_fee_of(found) == Decimal("5000.00")


def test_missing_structure_means_zero_base_fee():
    found = resolve_fee_structure(CLASS_A, QUARTER, [make_structure(CLASS_B, QUARTER)])

    assert found is None
    assert base_fee_of(found) == Decimal("0.00")


def test_duplicates_resolve_to_most_recent():
    old = make_structure(CLASS_A, QUARTER, total="4000", created_at=datetime(2024, 1, 1))
    new = make_structure(CLASS_A, QUARTER, total="4500", created_at=datetime(2024, 2, 1))

    assert resolve_fee_structure(CLASS_A, QUARTER, [old, new]) is new
    assert resolve_fee_structure(CLASS_A, QUARTER, [new, old]) is new


def test_duplicates_with_same_timestamp_are_stable_regardless_of_order():
    same = datetime(2024, 1, 1)
    rows = [make_structure(CLASS_A, QUARTER, created_at=same) for _ in range(4)]

    first = resolve_fee_structure(CLASS_A, QUARTER, rows)

    assert resolve_fee_structure(CLASS_A, QUARTER, list(reversed(rows))) is first
    assert first.id == max(rows, key=lambda r: str(r.id)).id


def test_component_total():
    total = component_total(tuition_fee="4000", transport_fee=500, activity_fee="250.50", unknown=99)
    assert total == Decimal("4750.50")
