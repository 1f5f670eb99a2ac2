"""Fee structure schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class FeeStructureCreate(BaseModel):
    """total_fee is derived server-side from the components."""

    class_id: UUID
    quarter_id: UUID
    tuition_fee: Decimal = Field(Decimal("0"), ge=0)
    transport_fee: Decimal = Field(Decimal("0"), ge=0)
    activity_fee: Decimal = Field(Decimal("0"), ge=0)
    examination_fee: Decimal = Field(Decimal("0"), ge=0)
    other_fee: Decimal = Field(Decimal("0"), ge=0)


class FeeStructureUpdate(BaseModel):
    tuition_fee: Optional[Decimal] = Field(None, ge=0)
    transport_fee: Optional[Decimal] = Field(None, ge=0)
    activity_fee: Optional[Decimal] = Field(None, ge=0)
    examination_fee: Optional[Decimal] = Field(None, ge=0)
    other_fee: Optional[Decimal] = Field(None, ge=0)


class FeeStructureResponse(BaseModel):
    id: UUID
    class_id: UUID
    quarter_id: UUID
    tuition_fee: Decimal
    transport_fee: Decimal
    activity_fee: Decimal
    examination_fee: Decimal
    other_fee: Decimal
    total_fee: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
