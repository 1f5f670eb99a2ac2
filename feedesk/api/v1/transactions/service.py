"""
Transaction ledger: payment collection, refunds, gateway status updates, listing and receipts.
Rows are append-only except for the status marker on a refunded payment and pending -> final transitions.
"""

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.billing.engine import BalanceEngine
from feedesk.billing.ledger import refunded_total
from feedesk.billing.money import ZERO, floor_zero, to_money
from feedesk.core.enums import PaymentMode, TransactionKind, TransactionStatus
from feedesk.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from feedesk.core.models import FeeAuditLog, Quarter, SchoolClass, Student, Transaction

from .receipt_no import generate_receipt_no
from .schemas import (
    PaymentCreate,
    ReceiptResponse,
    RefundCreate,
    TransactionResponse,
    TransactionStatusUpdate,
)

logger = logging.getLogger(__name__)

# pending rows are settled by the gateway callback; nothing else moves.
ALLOWED_STATUS_CHANGES = {
    TransactionStatus.pending.value: {TransactionStatus.completed.value, TransactionStatus.failed.value},
}


def _txn_to_response(t: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=t.id,
        student_id=t.student_id,
        quarter_id=t.quarter_id,
        receipt_no=t.receipt_no,
        kind=t.kind,
        refund_of_id=t.refund_of_id,
        amount_paid=to_money(t.amount_paid),
        payment_mode=t.payment_mode,
        payment_date=t.payment_date,
        payment_reference=t.payment_reference,
        cheque_number=t.cheque_number,
        cheque_date=t.cheque_date,
        bank_name=t.bank_name,
        status=t.status,
        notes=t.notes,
        base_fee=to_money(t.base_fee),
        extra_charges=to_money(t.extra_charges),
        late_fee=to_money(t.late_fee),
        concession_amount=to_money(t.concession_amount),
        total_amount=to_money(t.total_amount),
        balance_amount=to_money(t.balance_amount),
        created_by=t.created_by,
        created_at=t.created_at,
    )


def _log_fee_audit(
    db: AsyncSession,
    reference_id: UUID,
    action_type: str,
    old_value: Optional[dict],
    new_value: Optional[dict],
    changed_by: Optional[str],
) -> None:
    db.add(
        FeeAuditLog(
            reference_table="transactions",
            reference_id=reference_id,
            action_type=action_type,
            old_value=old_value,
            new_value=new_value,
            changed_by=changed_by,
        )
    )


async def _insert_with_receipt(db: AsyncSession, txn: Transaction) -> None:
    """Flush txn with a fresh receipt number. A collision aborts the request; the caller may resubmit."""
    txn.receipt_no = generate_receipt_no()
    db.add(txn)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.warning("Receipt number collision on %s", txn.receipt_no)
        raise ConflictError("Receipt number collision, please retry")


async def collect_payment(
    db: AsyncSession,
    engine: BalanceEngine,
    payload: PaymentCreate,
    created_by: Optional[str] = None,
) -> TransactionResponse:
    student = await db.get(Student, payload.student_id)
    if not student or not student.is_active:
        raise NotFoundError("Student not found")
    if not await db.get(Quarter, payload.quarter_id):
        raise NotFoundError("Quarter not found")

    payment_date = payload.payment_date or engine.clock()
    current = await engine.quarter_balance(db, payload.student_id, payload.quarter_id, as_of=payment_date)
    if payload.expected_balance is not None and to_money(payload.expected_balance) != current.balance:
        raise ConflictError(
            f"Balance changed since it was read (expected {to_money(payload.expected_balance)}, now {current.balance})"
        )

    amount = to_money(payload.amount_paid)
    if amount > current.balance:
        logger.warning(
            "Payment %s exceeds balance %s for student %s quarter %s",
            amount, current.balance, payload.student_id, payload.quarter_id,
        )

    counted = payload.status == TransactionStatus.completed
    txn = Transaction(
        student_id=payload.student_id,
        quarter_id=payload.quarter_id,
        kind=TransactionKind.PAYMENT.value,
        amount_paid=amount,
        payment_mode=payload.payment_mode.value,
        payment_date=payment_date,
        payment_reference=(payload.payment_reference or "").strip() or None,
        cheque_number=(payload.cheque_number or "").strip() or None,
        cheque_date=payload.cheque_date if payload.payment_mode == PaymentMode.CHEQUE else None,
        bank_name=(payload.bank_name or "").strip() or None,
        status=payload.status.value,
        notes=(payload.notes or "").strip() or None,
        base_fee=current.base_fee,
        extra_charges=current.extra_charges_amount,
        late_fee=current.late_fee,
        concession_amount=current.concession_applied,
        total_amount=current.total_due,
        balance_amount=floor_zero(current.balance - amount) if counted else current.balance,
        created_by=created_by,
    )
    await _insert_with_receipt(db, txn)
    _log_fee_audit(
        db, txn.id, "CREATE", None,
        {
            "receipt_no": txn.receipt_no,
            "amount_paid": str(amount),
            "payment_mode": txn.payment_mode,
            "status": txn.status,
            "balance_before": str(current.balance),
        },
        created_by,
    )
    await db.commit()
    await db.refresh(txn)
    logger.info("Collected %s (%s) receipt %s", amount, txn.payment_mode, txn.receipt_no)
    return _txn_to_response(txn)


async def refund_transaction(
    db: AsyncSession,
    engine: BalanceEngine,
    transaction_id: UUID,
    payload: RefundCreate,
    created_by: Optional[str] = None,
) -> TransactionResponse:
    """Append a negative REFUND row against a payment and flag the payment as refunded."""
    # Row lock on the payment serializes concurrent refunds of it until commit; sqlite ignores FOR UPDATE.
    original = (
        await db.execute(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()
    if not original:
        raise NotFoundError("Transaction not found")
    if original.kind != TransactionKind.PAYMENT.value:
        raise ValidationFailed("Only payments can be refunded")
    if original.status not in (TransactionStatus.completed.value, TransactionStatus.refunded.value):
        raise ValidationFailed("Only completed payments can be refunded")

    siblings = (
        await db.execute(select(Transaction).where(Transaction.refund_of_id == original.id))
    ).scalars().all()
    refundable = to_money(original.amount_paid) - refunded_total(siblings, original.id)
    amount = to_money(payload.amount) if payload.amount is not None else refundable
    if amount <= ZERO or amount > refundable:
        raise ValidationFailed(f"Refund amount must be between 0.01 and {refundable}")

    refund = Transaction(
        student_id=original.student_id,
        quarter_id=original.quarter_id,
        kind=TransactionKind.REFUND.value,
        refund_of_id=original.id,
        amount_paid=-amount,
        payment_mode=original.payment_mode,
        payment_date=engine.clock(),
        payment_reference=f"REFUND-{original.receipt_no}",
        status=TransactionStatus.completed.value,
        notes=f"Refund for {original.receipt_no}. Reason: {payload.reason.strip()}",
        created_by=created_by,
    )
    await _insert_with_receipt(db, refund)

    old_status = original.status
    original.status = TransactionStatus.refunded.value
    original.notes = f"{original.notes or ''}\nRefunded: {amount} - {payload.reason.strip()}".strip()
    _log_fee_audit(
        db, original.id, "REFUND",
        {"status": old_status},
        {"status": original.status, "refund_id": str(refund.id), "refund_amount": str(amount)},
        created_by,
    )
    await db.commit()
    await db.refresh(refund)
    logger.info("Refunded %s against %s as %s", amount, original.receipt_no, refund.receipt_no)
    return _txn_to_response(refund)


async def update_status(
    db: AsyncSession,
    transaction_id: UUID,
    payload: TransactionStatusUpdate,
    changed_by: Optional[str] = None,
) -> TransactionResponse:
    """Settle a pending (gateway) payment as completed or failed."""
    txn = await db.get(Transaction, transaction_id)
    if not txn:
        raise NotFoundError("Transaction not found")
    new_status = payload.status.value
    if new_status not in ALLOWED_STATUS_CHANGES.get(txn.status, set()):
        raise ValidationFailed(f"Cannot change status from {txn.status} to {new_status}")
    old_status = txn.status
    txn.status = new_status
    if payload.payment_reference:
        txn.payment_reference = payload.payment_reference.strip()
    if new_status == TransactionStatus.completed.value:
        txn.balance_amount = floor_zero(to_money(txn.balance_amount) - to_money(txn.amount_paid))
    _log_fee_audit(db, txn.id, "UPDATE", {"status": old_status}, {"status": new_status}, changed_by)
    await db.commit()
    await db.refresh(txn)
    return _txn_to_response(txn)


async def get_transaction(db: AsyncSession, transaction_id: UUID) -> TransactionResponse:
    txn = await db.get(Transaction, transaction_id)
    if not txn:
        raise NotFoundError("Transaction not found")
    return _txn_to_response(txn)


async def list_transactions(
    db: AsyncSession,
    student_id: Optional[UUID] = None,
    quarter_id: Optional[UUID] = None,
    status: Optional[TransactionStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    created_by: Optional[str] = None,
) -> List[TransactionResponse]:
    stmt = select(Transaction)
    if student_id is not None:
        stmt = stmt.where(Transaction.student_id == student_id)
    if quarter_id is not None:
        stmt = stmt.where(Transaction.quarter_id == quarter_id)
    if status is not None:
        stmt = stmt.where(Transaction.status == status.value)
    if date_from is not None:
        stmt = stmt.where(Transaction.payment_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Transaction.payment_date <= date_to)
    if created_by:
        stmt = stmt.where(Transaction.created_by == created_by)
    stmt = stmt.order_by(Transaction.created_at.desc(), Transaction.receipt_no.desc())
    result = await db.execute(stmt)
    return [_txn_to_response(t) for t in result.scalars().all()]


async def get_receipt(db: AsyncSession, transaction_id: UUID) -> ReceiptResponse:
    row = (
        await db.execute(
            select(Transaction, Student, Quarter, SchoolClass.class_name)
            .join(Student, Transaction.student_id == Student.id)
            .join(Quarter, Transaction.quarter_id == Quarter.id)
            .outerjoin(SchoolClass, Student.class_id == SchoolClass.id)
            .where(Transaction.id == transaction_id)
        )
    ).first()
    if not row:
        raise NotFoundError("Transaction not found")
    txn, student, quarter, class_name = row
    return ReceiptResponse(
        transaction=_txn_to_response(txn),
        student_name=student.name,
        admission_no=student.admission_no,
        class_name=class_name,
        section=student.section,
        academic_year=quarter.academic_year,
        quarter_name=quarter.quarter_name,
        due_date=quarter.due_date,
    )
