from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from feedesk.core.enums import LateFeeType


class LateFeePolicyFields(BaseModel):
    """Unset fields fall back to the school-wide defaults."""

    late_fee_type: Optional[LateFeeType] = None
    late_fee_amount: Optional[Decimal] = Field(None, ge=0)
    late_fee_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    grace_period_days: Optional[int] = Field(None, ge=0)
    apply_daily: Optional[bool] = None
    max_late_fee: Optional[Decimal] = Field(None, ge=0)


class QuarterCreate(LateFeePolicyFields):
    academic_year: str = Field(..., max_length=20, description="e.g. 2024-25")
    quarter_name: str = Field(..., max_length=20, description="Q1..Q4")
    quarter_number: int = Field(..., ge=1, le=4)
    start_date: date
    end_date: date
    due_date: date

    @model_validator(mode="after")
    def validate_date_order(self) -> "QuarterCreate":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        if self.end_date > self.due_date:
            raise ValueError("end_date must not be after due_date")
        return self


class LateFeePolicyUpdate(LateFeePolicyFields):
    pass


class QuarterResponse(BaseModel):
    id: UUID
    academic_year: str
    quarter_name: str
    quarter_number: int
    start_date: date
    end_date: date
    due_date: date
    late_fee_type: Optional[str] = None
    late_fee_amount: Optional[Decimal] = None
    late_fee_percentage: Optional[Decimal] = None
    grace_period_days: Optional[int] = None
    apply_daily: Optional[bool] = None
    max_late_fee: Optional[Decimal] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
