"""Transient ORM rows for exercising the billing functions without a database."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

from feedesk.core.models import ExtraCharge, FeeStructure, Quarter, Student, Transaction

DEFAULTS = SimpleNamespace(
    late_fee_type="flat",
    late_fee_amount=Decimal("100"),
    late_fee_percentage=Decimal("5"),
    late_fee_grace_period_days=0,
    late_fee_apply_daily=False,
    late_fee_max=None,
)

_receipt_seq = iter(range(1, 1_000_000))


def make_student(class_id, concession_amount="0", concession_percentage="0", **kw) -> Student:
    fields = dict(
        id=uuid.uuid4(),
        admission_no="ADM001",
        name="Student S",
        class_id=class_id,
        section="A",
        concession_amount=Decimal(concession_amount),
        concession_percentage=Decimal(concession_percentage),
        is_active=True,
    )
    fields.update(kw)
    return Student(**fields)


def make_quarter(due_date=date(2024, 7, 10), number=1, **kw) -> Quarter:
    fields = dict(
        id=uuid.uuid4(),
        academic_year="2024-25",
        quarter_name=f"Q{number}",
        quarter_number=number,
        start_date=date(2024, 4, 1),
        end_date=date(2024, 6, 30),
        due_date=due_date,
        late_fee_type="flat",
        late_fee_amount=Decimal("100"),
        late_fee_percentage=None,
        grace_period_days=0,
        apply_daily=False,
        max_late_fee=None,
        is_active=True,
    )
    fields.update(kw)
    return Quarter(**fields)


def make_structure(class_id, quarter_id, total="5000", created_at=None, **kw) -> FeeStructure:
    fields = dict(
        id=uuid.uuid4(),
        class_id=class_id,
        quarter_id=quarter_id,
        tuition_fee=Decimal(total),
        transport_fee=Decimal("0"),
        activity_fee=Decimal("0"),
        examination_fee=Decimal("0"),
        other_fee=Decimal("0"),
        total_fee=Decimal(total),
        created_at=created_at or datetime(2024, 3, 1, 9, 0),
    )
    fields.update(kw)
    return FeeStructure(**fields)


def make_charge(quarter_id, amount, scope, student_id=None, class_id=None, title="Charge") -> ExtraCharge:
    return ExtraCharge(
        id=uuid.uuid4(),
        quarter_id=quarter_id,
        scope=scope,
        student_id=student_id,
        class_id=class_id,
        title=title,
        amount=Decimal(amount),
        is_mandatory=True,
    )


def make_txn(
    student_id,
    quarter_id,
    amount,
    status="completed",
    payment_date=date(2024, 7, 5),
    refund_of_id=None,
    **kw,
) -> Transaction:
    amount = Decimal(amount)
    fields = dict(
        id=uuid.uuid4(),
        student_id=student_id,
        quarter_id=quarter_id,
        receipt_no=f"RCP{next(_receipt_seq):06d}",
        kind="REFUND" if amount < 0 else "PAYMENT",
        refund_of_id=refund_of_id,
        amount_paid=amount,
        payment_mode="cash",
        payment_date=payment_date,
        status=status,
    )
    fields.update(kw)
    return Transaction(**fields)
