"""Transactions router: collect, refund, settle gateway payments, list, receipts."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.api.v1.balances.dependencies import get_balance_engine
from feedesk.auth.dependencies import get_current_user
from feedesk.auth.rbac import STAFF_ROLES, ensure_student_access, require_roles
from feedesk.auth.schemas import CurrentUser
from feedesk.billing.engine import BalanceEngine
from feedesk.core.enums import PaymentMode, TransactionStatus, UserRole
from feedesk.core.exceptions import ServiceError
from feedesk.db.session import get_db

from .schemas import (
    PaymentCreate,
    ReceiptResponse,
    RefundCreate,
    TransactionResponse,
    TransactionStatusUpdate,
)
from . import service

router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def collect_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    engine: BalanceEngine = Depends(get_balance_engine),
    current_user: CurrentUser = Depends(get_current_user),
) -> TransactionResponse:
    """Staff collect any payment; parents may only start online payments for their own students."""
    ensure_student_access(current_user, payload.student_id)
    if current_user.role == UserRole.PARENT and payload.payment_mode != PaymentMode.ONLINE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    if current_user.role == UserRole.PARENT:
        # settled to completed by the gateway callback
        payload = payload.model_copy(update={"status": TransactionStatus.pending})
    try:
        return await service.collect_payment(db, engine, payload, created_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{transaction_id}/refund",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def refund_transaction(
    transaction_id: UUID,
    payload: RefundCreate,
    db: AsyncSession = Depends(get_db),
    engine: BalanceEngine = Depends(get_balance_engine),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
) -> TransactionResponse:
    try:
        return await service.refund_transaction(
            db, engine, transaction_id, payload, created_by=current_user.id
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch(
    "/{transaction_id}/status",
    response_model=TransactionResponse,
)
async def update_status(
    transaction_id: UUID,
    payload: TransactionStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*STAFF_ROLES)),
) -> TransactionResponse:
    try:
        return await service.update_status(db, transaction_id, payload, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    student_id: Optional[UUID] = Query(None),
    quarter_id: Optional[UUID] = Query(None),
    txn_status: Optional[TransactionStatus] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    created_by: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[TransactionResponse]:
    if current_user.role == UserRole.PARENT:
        if student_id is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="student_id is required")
        ensure_student_access(current_user, student_id)
    return await service.list_transactions(
        db,
        student_id=student_id,
        quarter_id=quarter_id,
        status=txn_status,
        date_from=date_from,
        date_to=date_to,
        created_by=created_by,
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> TransactionResponse:
    try:
        txn = await service.get_transaction(db, transaction_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    ensure_student_access(current_user, txn.student_id)
    return txn


@router.get("/{transaction_id}/receipt", response_model=ReceiptResponse)
async def get_receipt(
    transaction_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ReceiptResponse:
    try:
        receipt = await service.get_receipt(db, transaction_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    ensure_student_access(current_user, receipt.transaction.student_id)
    return receipt
