"""Transaction schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from feedesk.core.enums import PaymentMode, TransactionKind, TransactionStatus


class PaymentCreate(BaseModel):
    student_id: UUID
    quarter_id: UUID
    amount_paid: Decimal = Field(..., gt=0)
    payment_mode: PaymentMode
    payment_date: Optional[date] = None
    payment_reference: Optional[str] = Field(None, max_length=100)
    cheque_number: Optional[str] = Field(None, max_length=30)
    cheque_date: Optional[date] = None
    bank_name: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    status: TransactionStatus = TransactionStatus.completed
    expected_balance: Optional[Decimal] = Field(
        None, description="Balance the cashier saw; collection is rejected if it has changed since"
    )

    @model_validator(mode="after")
    def validate_mode_fields(self) -> "PaymentCreate":
        if self.payment_mode == PaymentMode.CHEQUE and not (self.cheque_number or "").strip():
            raise ValueError("cheque_number is required for cheque payments")
        if self.status not in (TransactionStatus.completed, TransactionStatus.pending):
            raise ValueError("New payments must be completed or pending")
        return self


class RefundCreate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0, description="Defaults to everything not yet refunded")
    reason: str = Field(..., min_length=1)


class TransactionStatusUpdate(BaseModel):
    status: TransactionStatus
    payment_reference: Optional[str] = Field(None, max_length=100)


class TransactionResponse(BaseModel):
    id: UUID
    student_id: UUID
    quarter_id: UUID
    receipt_no: str
    kind: TransactionKind
    refund_of_id: Optional[UUID] = None
    amount_paid: Decimal
    payment_mode: str
    payment_date: date
    payment_reference: Optional[str] = None
    cheque_number: Optional[str] = None
    cheque_date: Optional[date] = None
    bank_name: Optional[str] = None
    status: TransactionStatus
    notes: Optional[str] = None
    base_fee: Decimal
    extra_charges: Decimal
    late_fee: Decimal
    concession_amount: Decimal
    total_amount: Decimal
    balance_amount: Decimal
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ReceiptResponse(BaseModel):
    """Everything a printed or emailed receipt shows."""

    transaction: TransactionResponse
    student_name: str
    admission_no: str
    class_name: Optional[str] = None
    section: Optional[str] = None
    academic_year: str
    quarter_name: str
    due_date: date
