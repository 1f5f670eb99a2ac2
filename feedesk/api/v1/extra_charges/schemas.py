from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from feedesk.core.enums import ChargeScopeType


class ExtraChargeCreate(BaseModel):
    quarter_id: UUID
    scope: ChargeScopeType
    student_id: Optional[UUID] = None
    class_id: Optional[UUID] = None
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    is_mandatory: bool = True

    @model_validator(mode="after")
    def validate_scope_target(self) -> "ExtraChargeCreate":
        if self.scope == ChargeScopeType.INDIVIDUAL:
            if self.student_id is None or self.class_id is not None:
                raise ValueError("INDIVIDUAL charges need student_id and no class_id")
        elif self.scope == ChargeScopeType.CLASS:
            if self.class_id is None or self.student_id is not None:
                raise ValueError("CLASS charges need class_id and no student_id")
        elif self.student_id is not None or self.class_id is not None:
            raise ValueError("SCHOOL charges take neither student_id nor class_id")
        return self


class ExtraChargeResponse(BaseModel):
    id: UUID
    quarter_id: UUID
    scope: ChargeScopeType
    student_id: Optional[UUID] = None
    class_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    amount: Decimal
    is_mandatory: bool
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
