from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class DefaulterItem(BaseModel):
    """One reminder target: a student with an outstanding balance for the quarter."""

    student_id: UUID
    admission_no: str
    student_name: str
    class_id: UUID
    parent_email: Optional[str] = None
    parent_contact: Optional[str] = None
    total_due: Decimal
    amount_paid: Decimal
    late_fee: Decimal
    balance: Decimal
    is_overdue: bool


class CollectionSummary(BaseModel):
    """Dashboard totals over every active student and active quarter."""

    total_students: int
    total_collected: Decimal
    total_refunded: Decimal
    pending_amount: Decimal
    late_fees_outstanding: Decimal
    defaulter_count: int
    online_payments: int
    offline_payments: int
