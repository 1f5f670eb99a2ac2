import itertools
import uuid
from decimal import Decimal

from builders import make_txn
from feedesk.billing.ledger import Payment, Refund, kind_of, ledger_entries, net_paid, refunded_total, to_entry

STUDENT = uuid.uuid4()
QUARTER = uuid.uuid4()


def test_only_completed_and_refunded_rows_count():
    rows = [
        make_txn(STUDENT, QUARTER, "1000", status="completed"),
        make_txn(STUDENT, QUARTER, "2000", status="pending"),
        make_txn(STUDENT, QUARTER, "3000", status="failed"),
    ]
    assert net_paid(rows) == Decimal("1000.00")


def test_refund_nets_out_original_payment():
    payment = make_txn(STUDENT, QUARTER, "5000", status="refunded")
    refund = make_txn(STUDENT, QUARTER, "-5000", refund_of_id=payment.id)

    assert net_paid([payment, refund]) == Decimal("0.00")
    assert refunded_total([payment, refund], payment.id) == Decimal("5000.00")


def test_partial_refund():
    payment = make_txn(STUDENT, QUARTER, "5000", status="refunded")
    refund = make_txn(STUDENT, QUARTER, "-1200", refund_of_id=payment.id)
    other = make_txn(STUDENT, QUARTER, "300")

    assert net_paid([payment, refund, other]) == Decimal("4100.00")
    assert refunded_total([payment, refund, other], payment.id) == Decimal("1200.00")
    assert refunded_total([payment, refund, other], other.id) == Decimal("0.00")


def test_net_paid_is_independent_of_row_order():
    payment = make_txn(STUDENT, QUARTER, "2500.50", status="refunded")
    rows = [
        payment,
        make_txn(STUDENT, QUARTER, "-500.25", refund_of_id=payment.id),
        make_txn(STUDENT, QUARTER, "1000"),
        make_txn(STUDENT, QUARTER, "750", status="pending"),
    ]
    results = {net_paid(list(order)) for order in itertools.permutations(rows)}
    assert results == {Decimal("3000.25")}


def test_entries_are_tagged_by_kind():
    payment = make_txn(STUDENT, QUARTER, "100")
    refund = make_txn(STUDENT, QUARTER, "-40", refund_of_id=payment.id)
    legacy_negative = make_txn(STUDENT, QUARTER, "-10", kind="PAYMENT")

    assert to_entry(payment) == Payment(payment.id, Decimal("100.00"))
    assert to_entry(refund) == Refund(refund.id, Decimal("-40.00"), payment.id)
    assert isinstance(to_entry(legacy_negative), Refund)
    assert kind_of(legacy_negative) == "REFUND"
    assert len(ledger_entries([payment, refund, make_txn(STUDENT, QUARTER, "1", status="failed")])) == 2
