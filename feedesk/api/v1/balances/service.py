"""Balance views built on the balance engine: student details, defaulters, dashboard summary."""

import io
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from openpyxl import Workbook
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.billing.classifier import is_defaulter
from feedesk.billing.engine import BalanceEngine, build_student_fee_details
from feedesk.billing.ledger import COUNTED_STATUSES, Refund, to_entry
from feedesk.billing.money import ZERO, money_sum
from feedesk.billing.schemas import StudentFeeDetails
from feedesk.core.enums import PaymentMode
from feedesk.core.exceptions import DataLoadError
from feedesk.core.models import ExtraCharge, FeeStructure, Quarter, Student, Transaction

from .schemas import CollectionSummary, DefaulterItem

logger = logging.getLogger(__name__)

ONLINE_MODES = (PaymentMode.ONLINE.value, PaymentMode.UPI.value)


async def get_student_fee_details(
    db: AsyncSession,
    engine: BalanceEngine,
    student_id: UUID,
    as_of: Optional[date] = None,
    academic_year: Optional[str] = None,
) -> StudentFeeDetails:
    return await engine.compute_student_fee_details(db, student_id, as_of=as_of, academic_year=academic_year)


async def list_defaulters(
    db: AsyncSession,
    engine: BalanceEngine,
    quarter_id: UUID,
    class_id: Optional[UUID] = None,
    as_of: Optional[date] = None,
) -> List[DefaulterItem]:
    rows = await engine.defaulters(db, quarter_id, class_id=class_id, as_of=as_of)
    logger.info("Quarter %s: %d defaulters", quarter_id, len(rows))
    return [
        DefaulterItem(
            student_id=s.id,
            admission_no=s.admission_no,
            student_name=s.name,
            class_id=s.class_id,
            parent_email=s.parent_email,
            parent_contact=s.parent_contact,
            total_due=qb.total_due,
            amount_paid=qb.amount_paid,
            late_fee=qb.late_fee,
            balance=qb.balance,
            is_overdue=qb.is_overdue,
        )
        for s, qb in rows
    ]


DEFAULTER_HEADERS = [
    "admission_no",
    "student_name",
    "parent_email",
    "parent_contact",
    "total_due",
    "amount_paid",
    "late_fee",
    "balance",
    "is_overdue",
]


def build_defaulters_excel(items: List[DefaulterItem]) -> bytes:
    """One row per defaulter; amounts written as numbers so the sheet can total them."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Defaulters"
    ws.append(DEFAULTER_HEADERS)
    for item in items:
        ws.append(
            [
                item.admission_no,
                item.student_name,
                item.parent_email or "",
                item.parent_contact or "",
                float(item.total_due),
                float(item.amount_paid),
                float(item.late_fee),
                float(item.balance),
                "yes" if item.is_overdue else "no",
            ]
        )
    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()


async def collection_summary(
    db: AsyncSession,
    engine: BalanceEngine,
    as_of: Optional[date] = None,
) -> CollectionSummary:
    """
    Loads everything once and folds per student in memory. Fine for a single school;
    revisit if this ever serves many thousands of students per call.
    """
    try:
        students = (await db.execute(select(Student).where(Student.is_active.is_(True)))).scalars().all()
        quarters = (await db.execute(select(Quarter).where(Quarter.is_active.is_(True)))).scalars().all()
        structures = (await db.execute(select(FeeStructure))).scalars().all()
        charges = (await db.execute(select(ExtraCharge))).scalars().all()
        transactions = (await db.execute(select(Transaction))).scalars().all()
    except SQLAlchemyError as e:
        engine.observability.capture_error(e, {"load": "collection summary"})
        raise DataLoadError("Failed to load collection summary") from e

    day = as_of or engine.clock()
    by_student = {}
    for t in transactions:
        by_student.setdefault(t.student_id, []).append(t)

    pending = ZERO
    late_fees = ZERO
    defaulters = 0
    for s in students:
        details = build_student_fee_details(
            s, quarters, structures, charges, by_student.get(s.id, []), day, engine.late_fee_defaults
        )
        pending += details.totals.balance
        late_fees += money_sum(q.late_fee for q in details.quarters if q.balance > 0)
        if any(is_defaulter(q) for q in details.quarters):
            defaulters += 1

    counted = [t for t in transactions if t.status in COUNTED_STATUSES]
    entries = [to_entry(t) for t in counted]
    payments = [t for t, e in zip(counted, entries) if not isinstance(e, Refund)]
    return CollectionSummary(
        total_students=len(students),
        total_collected=money_sum(e.amount for e in entries if not isinstance(e, Refund)),
        total_refunded=money_sum(-e.amount for e in entries if isinstance(e, Refund)),
        pending_amount=pending,
        late_fees_outstanding=late_fees,
        defaulter_count=defaulters,
        online_payments=sum(1 for t in payments if t.payment_mode in ONLINE_MODES),
        offline_payments=sum(1 for t in payments if t.payment_mode not in ONLINE_MODES),
    )
