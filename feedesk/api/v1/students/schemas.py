from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class StudentCreate(BaseModel):
    admission_no: str = Field(..., min_length=1, max_length=30)
    name: str = Field(..., min_length=1, max_length=255)
    class_id: UUID
    section: Optional[str] = Field(None, max_length=10)
    parent_contact: Optional[str] = Field(None, max_length=20)
    parent_email: Optional[EmailStr] = None
    concession_amount: Decimal = Field(Decimal("0"), ge=0)
    concession_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    class_id: Optional[UUID] = None
    section: Optional[str] = Field(None, max_length=10)
    parent_contact: Optional[str] = Field(None, max_length=20)
    parent_email: Optional[EmailStr] = None
    concession_amount: Optional[Decimal] = Field(None, ge=0)
    concession_percentage: Optional[Decimal] = Field(None, ge=0, le=100)


class StudentResponse(BaseModel):
    id: UUID
    admission_no: str
    name: str
    class_id: UUID
    class_name: Optional[str] = None
    section: Optional[str] = None
    parent_contact: Optional[str] = None
    parent_email: Optional[str] = None
    concession_amount: Decimal
    concession_percentage: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
