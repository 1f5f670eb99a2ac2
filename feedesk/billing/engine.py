"""
Balance engine: per-quarter fee breakdown and running balance for a student.

The computation is a pure read over already-loaded rows (build_student_fee_details); BalanceEngine
adds loading through an AsyncSession, failure handling and metrics. Balances are derived on every
read and never stored.
"""

import logging
import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.billing.classifier import is_defaulter, is_overdue
from feedesk.billing.extra_charges import applicable_charges, scope_label
from feedesk.billing.fee_structures import base_fee_of, resolve_fee_structure
from feedesk.billing.late_fee import LateFeePolicy, compute_late_fee
from feedesk.billing.ledger import kind_of, net_paid
from feedesk.billing.money import ZERO, floor_zero, money_sum, percent_of, to_money
from feedesk.billing.schemas import (
    ExtraChargeLine,
    FeeTotals,
    LedgerLine,
    QuarterBalance,
    QuarterInfo,
    StudentFeeDetails,
    StudentInfo,
)
from feedesk.core.config import settings
from feedesk.core.enums import ChargeScopeType
from feedesk.core.exceptions import DataLoadError, NotFoundError
from feedesk.core.models import ExtraCharge, FeeStructure, Quarter, Student, Transaction
from feedesk.core.observability import LoggingObservability, Observability

logger = logging.getLogger(__name__)


def _quarter_order(q: Quarter):
    return (q.start_date, q.quarter_number or 0, str(q.id))


def _txn_order(t: Transaction):
    return (t.payment_date, t.receipt_no or "", str(t.id))


def _student_info(student: Student) -> StudentInfo:
    return StudentInfo(
        id=student.id,
        admission_no=student.admission_no,
        name=student.name,
        class_id=student.class_id,
        section=student.section,
        concession_amount=to_money(student.concession_amount),
        concession_percentage=Decimal(str(student.concession_percentage or 0)),
        is_active=student.is_active is not False,
    )


def concession_for(student: Student, gross_due) -> Decimal:
    """Flat concession plus percentage concession of gross due; both may apply."""
    flat = to_money(student.concession_amount)
    pct = percent_of(gross_due, student.concession_percentage or 0)
    return flat + pct


def compute_quarter_balance(
    student: Student,
    quarter: Quarter,
    structures: Sequence[FeeStructure],
    charges: Sequence[ExtraCharge],
    transactions: Sequence[Transaction],
    as_of: date,
    late_fee_defaults=settings,
) -> QuarterBalance:
    structure = resolve_fee_structure(student.class_id, quarter.id, structures)
    base_fee = base_fee_of(structure)

    quarter_charges = applicable_charges(student.id, student.class_id, quarter.id, charges)
    extra_amount = money_sum(c.amount for c in quarter_charges)
    gross_due = base_fee + extra_amount

    quarter_txns = sorted(
        (t for t in transactions if t.student_id == student.id and t.quarter_id == quarter.id),
        key=_txn_order,
    )
    amount_paid = net_paid(quarter_txns)
    concession = concession_for(student, gross_due)

    # Late fee is judged against gross due; concession is only subtracted afterwards.
    late_fee = ZERO
    if as_of > quarter.due_date and amount_paid < gross_due:
        policy = LateFeePolicy.from_quarter(quarter, late_fee_defaults)
        late_fee = compute_late_fee(quarter.due_date, policy, gross_due, as_of)

    total_due = gross_due + late_fee - concession
    balance = floor_zero(total_due - amount_paid)

    return QuarterBalance(
        quarter=QuarterInfo.model_validate(quarter),
        fee_structure_id=structure.id if structure is not None else None,
        extra_charges=[
            ExtraChargeLine(id=c.id, title=c.title, scope=scope_label(c), amount=to_money(c.amount))
            for c in sorted(quarter_charges, key=lambda c: (c.title, str(c.id)))
        ],
        transactions=[
            LedgerLine(
                id=t.id,
                receipt_no=t.receipt_no,
                kind=kind_of(t),
                amount_paid=to_money(t.amount_paid),
                status=t.status,
                payment_date=t.payment_date,
                refund_of_id=t.refund_of_id,
            )
            for t in quarter_txns
        ],
        base_fee=base_fee,
        extra_charges_amount=extra_amount,
        gross_due=gross_due,
        late_fee=late_fee,
        concession_applied=concession,
        total_due=total_due,
        amount_paid=amount_paid,
        balance=balance,
        is_overdue=is_overdue(quarter.due_date, as_of, balance),
    )


def summarize(quarters: Sequence[QuarterBalance]) -> FeeTotals:
    return FeeTotals(
        base_fee=money_sum(q.base_fee for q in quarters),
        extra_charges_amount=money_sum(q.extra_charges_amount for q in quarters),
        late_fee=money_sum(q.late_fee for q in quarters),
        concession_applied=money_sum(q.concession_applied for q in quarters),
        total_due=money_sum(q.total_due for q in quarters),
        amount_paid=money_sum(q.amount_paid for q in quarters),
        balance=money_sum(q.balance for q in quarters),
        overdue_quarters=sum(1 for q in quarters if q.is_overdue),
    )


def build_student_fee_details(
    student: Student,
    quarters: Sequence[Quarter],
    structures: Sequence[FeeStructure],
    charges: Sequence[ExtraCharge],
    transactions: Sequence[Transaction],
    as_of: date,
    late_fee_defaults=settings,
) -> StudentFeeDetails:
    """Every supplied quarter is evaluated, whether or not the student has transactions in it."""
    rows = [
        compute_quarter_balance(student, q, structures, charges, transactions, as_of, late_fee_defaults)
        for q in sorted(quarters, key=_quarter_order)
    ]
    return StudentFeeDetails(
        student=_student_info(student),
        as_of=as_of,
        quarters=rows,
        totals=summarize(rows),
    )


@dataclass
class FeeInputs:
    quarters: List[Quarter]
    structures: List[FeeStructure]
    charges: List[ExtraCharge]
    transactions: List[Transaction]


class BalanceEngine:
    """Loads a student's fee inputs and folds them into StudentFeeDetails."""

    def __init__(
        self,
        observability: Optional[Observability] = None,
        late_fee_defaults=None,
        clock: Optional[Callable[[], date]] = None,
    ) -> None:
        self.observability = observability or LoggingObservability()
        self.late_fee_defaults = late_fee_defaults or settings
        self.clock = clock or date.today

    async def _load(self, what: str, coro, context: dict):
        try:
            return await coro
        except SQLAlchemyError as e:
            self.observability.capture_error(e, {"load": what, **context})
            raise DataLoadError(f"Failed to load {what}") from e

    async def _scalars(self, db: AsyncSession, stmt) -> list:
        return list((await db.execute(stmt)).scalars().all())

    async def load_student(self, db: AsyncSession, student_id: UUID) -> Student:
        student = await self._load("student", db.get(Student, student_id), {"student_id": str(student_id)})
        if student is None:
            raise NotFoundError("Student not found")
        return student

    async def load_inputs(
        self,
        db: AsyncSession,
        student: Student,
        academic_year: Optional[str] = None,
    ) -> FeeInputs:
        ctx = {"student_id": str(student.id)}
        q_stmt = select(Quarter).where(Quarter.is_active.is_(True))
        if academic_year:
            q_stmt = q_stmt.where(Quarter.academic_year == academic_year)
        quarters = await self._load("quarters", self._scalars(db, q_stmt), ctx)
        quarter_ids = [q.id for q in quarters]
        if not quarter_ids:
            return FeeInputs([], [], [], [])

        structures = await self._load(
            "fee structures",
            self._scalars(
                db,
                select(FeeStructure).where(
                    FeeStructure.class_id == student.class_id,
                    FeeStructure.quarter_id.in_(quarter_ids),
                ),
            ),
            ctx,
        )
        charges = await self._load(
            "extra charges",
            self._scalars(
                db,
                select(ExtraCharge).where(
                    ExtraCharge.quarter_id.in_(quarter_ids),
                    or_(
                        ExtraCharge.student_id == student.id,
                        and_(ExtraCharge.scope == ChargeScopeType.CLASS.value, ExtraCharge.class_id == student.class_id),
                        ExtraCharge.scope == ChargeScopeType.SCHOOL.value,
                    ),
                ),
            ),
            ctx,
        )
        transactions = await self._load(
            "transactions",
            self._scalars(
                db,
                select(Transaction).where(
                    Transaction.student_id == student.id,
                    Transaction.quarter_id.in_(quarter_ids),
                ),
            ),
            ctx,
        )
        return FeeInputs(quarters, structures, charges, transactions)

    async def compute_student_fee_details(
        self,
        db: AsyncSession,
        student_id: UUID,
        as_of: Optional[date] = None,
        academic_year: Optional[str] = None,
    ) -> StudentFeeDetails:
        started = time.perf_counter()
        student = await self.load_student(db, student_id)
        inputs = await self.load_inputs(db, student, academic_year=academic_year)
        details = build_student_fee_details(
            student,
            inputs.quarters,
            inputs.structures,
            inputs.charges,
            inputs.transactions,
            as_of or self.clock(),
            self.late_fee_defaults,
        )
        self.observability.record_metric(
            "balance.compute.duration_ms", (time.perf_counter() - started) * 1000, {"scope": "student"}
        )
        self.observability.record_metric("balance.quarters", len(details.quarters), {"scope": "student"})
        return details

    async def quarter_balance(
        self,
        db: AsyncSession,
        student_id: UUID,
        quarter_id: UUID,
        as_of: Optional[date] = None,
    ) -> QuarterBalance:
        """Balance of a single quarter; used to prefill and validate payment collection."""
        details = await self.compute_student_fee_details(db, student_id, as_of=as_of)
        for row in details.quarters:
            if row.quarter.id == quarter_id:
                return row
        raise NotFoundError("Quarter not found")

    async def quarter_balances_for_class(
        self,
        db: AsyncSession,
        quarter_id: UUID,
        class_id: Optional[UUID] = None,
        as_of: Optional[date] = None,
    ) -> List[Tuple[Student, QuarterBalance]]:
        """Balances of every active student (optionally one class) for one quarter."""
        started = time.perf_counter()
        ctx = {"quarter_id": str(quarter_id)}
        quarter = await self._load("quarter", db.get(Quarter, quarter_id), ctx)
        if quarter is None or not quarter.is_active:
            raise NotFoundError("Quarter not found")

        s_stmt = select(Student).where(Student.is_active.is_(True))
        if class_id is not None:
            s_stmt = s_stmt.where(Student.class_id == class_id)
        students = await self._load("students", self._scalars(db, s_stmt.order_by(Student.admission_no)), ctx)
        structures = await self._load(
            "fee structures", self._scalars(db, select(FeeStructure).where(FeeStructure.quarter_id == quarter_id)), ctx
        )
        charges = await self._load(
            "extra charges", self._scalars(db, select(ExtraCharge).where(ExtraCharge.quarter_id == quarter_id)), ctx
        )
        transactions = await self._load(
            "transactions", self._scalars(db, select(Transaction).where(Transaction.quarter_id == quarter_id)), ctx
        )

        day = as_of or self.clock()
        out = [
            (s, compute_quarter_balance(s, quarter, structures, charges, transactions, day, self.late_fee_defaults))
            for s in students
        ]
        self.observability.record_metric(
            "balance.compute.duration_ms", (time.perf_counter() - started) * 1000, {"scope": "quarter"}
        )
        return out

    async def defaulters(
        self,
        db: AsyncSession,
        quarter_id: UUID,
        class_id: Optional[UUID] = None,
        as_of: Optional[date] = None,
    ) -> List[Tuple[Student, QuarterBalance]]:
        rows = await self.quarter_balances_for_class(db, quarter_id, class_id=class_id, as_of=as_of)
        return [(s, qb) for s, qb in rows if is_defaulter(qb)]
