"""Derived balance records returned by the balance engine. Never persisted."""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class StudentInfo(BaseModel):
    id: UUID
    admission_no: str
    name: str
    class_id: UUID
    section: Optional[str] = None
    concession_amount: Decimal
    concession_percentage: Decimal
    is_active: bool

    class Config:
        from_attributes = True


class QuarterInfo(BaseModel):
    id: UUID
    academic_year: str
    quarter_name: str
    quarter_number: int
    start_date: date
    end_date: date
    due_date: date

    class Config:
        from_attributes = True


class ExtraChargeLine(BaseModel):
    id: UUID
    title: str
    scope: str
    amount: Decimal


class LedgerLine(BaseModel):
    id: UUID
    receipt_no: str
    kind: str
    amount_paid: Decimal
    status: str
    payment_date: date
    refund_of_id: Optional[UUID] = None


class QuarterBalance(BaseModel):
    quarter: QuarterInfo
    fee_structure_id: Optional[UUID] = None
    extra_charges: List[ExtraChargeLine]
    transactions: List[LedgerLine]
    base_fee: Decimal
    extra_charges_amount: Decimal
    gross_due: Decimal
    late_fee: Decimal
    concession_applied: Decimal
    total_due: Decimal
    amount_paid: Decimal
    balance: Decimal
    is_overdue: bool


class FeeTotals(BaseModel):
    base_fee: Decimal
    extra_charges_amount: Decimal
    late_fee: Decimal
    concession_applied: Decimal
    total_due: Decimal
    amount_paid: Decimal
    balance: Decimal
    overdue_quarters: int


class StudentFeeDetails(BaseModel):
    student: StudentInfo
    as_of: date
    quarters: List[QuarterBalance]
    totals: FeeTotals
