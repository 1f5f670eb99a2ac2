"""
Folding a (student, quarter) transaction history into net amount paid.

Payments and refunds are distinct entries: a refund is its own negative-amount row referencing
the payment it reverses. Folding is a plain sum, so the result does not depend on row order.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Union
from uuid import UUID

from feedesk.billing.money import ZERO, money_sum, to_money
from feedesk.core.enums import TransactionKind, TransactionStatus
from feedesk.core.models import Transaction

# A payment later reversed keeps status=refunded but still counts; the reversing row nets it out.
COUNTED_STATUSES = frozenset({TransactionStatus.completed.value, TransactionStatus.refunded.value})


@dataclass(frozen=True)
class Payment:
    transaction_id: UUID
    amount: Decimal


@dataclass(frozen=True)
class Refund:
    transaction_id: UUID
    amount: Decimal  # negative
    original_transaction_id: Optional[UUID]


LedgerEntry = Union[Payment, Refund]


def to_entry(txn: Transaction) -> LedgerEntry:
    amount = to_money(txn.amount_paid)
    is_refund = (txn.kind or "").upper() == TransactionKind.REFUND.value or amount < 0
    if is_refund:
        return Refund(txn.id, -abs(amount), txn.refund_of_id)
    return Payment(txn.id, amount)


def counts_toward_paid(txn: Transaction) -> bool:
    return (txn.status or "") in COUNTED_STATUSES


def ledger_entries(transactions: Iterable[Transaction]) -> List[LedgerEntry]:
    return [to_entry(t) for t in transactions if counts_toward_paid(t)]


def net_paid(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of signed amounts over counted transactions. pending/failed rows never count."""
    return money_sum(e.amount for e in ledger_entries(transactions))


def refunded_total(transactions: Iterable[Transaction], original_id: UUID) -> Decimal:
    """Positive total already refunded against one payment."""
    total = ZERO
    for e in ledger_entries(transactions):
        if isinstance(e, Refund) and e.original_transaction_id == original_id:
            total += -e.amount
    return total


def kind_of(txn: Transaction) -> str:
    if isinstance(to_entry(txn), Refund):
        return TransactionKind.REFUND.value
    return TransactionKind.PAYMENT.value
