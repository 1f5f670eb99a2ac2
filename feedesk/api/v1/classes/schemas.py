from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ClassCreate(BaseModel):
    class_name: str = Field(..., max_length=50)
    display_order: Optional[int] = None
    quarterly_fee: Decimal = Field(Decimal("0"), ge=0)


class ClassUpdate(BaseModel):
    class_name: Optional[str] = Field(None, max_length=50)
    display_order: Optional[int] = None
    quarterly_fee: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ClassResponse(BaseModel):
    id: UUID
    class_name: str
    display_order: Optional[int] = None
    quarterly_fee: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
