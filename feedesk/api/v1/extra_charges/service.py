"""Extra charges: create, list and delete scoped supplemental fees."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.billing.money import to_money
from feedesk.core.enums import ChargeScopeType
from feedesk.core.exceptions import NotFoundError, ValidationFailed
from feedesk.core.models import ExtraCharge, Quarter, SchoolClass, Student

from .schemas import ExtraChargeCreate, ExtraChargeResponse

logger = logging.getLogger(__name__)


async def create_extra_charge(
    db: AsyncSession,
    payload: ExtraChargeCreate,
    created_by: Optional[str] = None,
) -> ExtraChargeResponse:
    if not await db.get(Quarter, payload.quarter_id):
        raise ValidationFailed("Invalid quarter")
    if payload.scope == ChargeScopeType.INDIVIDUAL and not await db.get(Student, payload.student_id):
        raise ValidationFailed("Invalid student")
    if payload.scope == ChargeScopeType.CLASS and not await db.get(SchoolClass, payload.class_id):
        raise ValidationFailed("Invalid class")

    charge = ExtraCharge(
        quarter_id=payload.quarter_id,
        scope=payload.scope.value,
        student_id=payload.student_id,
        class_id=payload.class_id,
        title=payload.title.strip(),
        description=(payload.description or "").strip() or None,
        amount=to_money(payload.amount),
        is_mandatory=payload.is_mandatory,
        created_by=created_by,
    )
    db.add(charge)
    await db.commit()
    await db.refresh(charge)
    logger.info("Created %s extra charge '%s' amount=%s", charge.scope, charge.title, charge.amount)
    return ExtraChargeResponse.model_validate(charge)


async def list_extra_charges(
    db: AsyncSession,
    student_id: Optional[UUID] = None,
    class_id: Optional[UUID] = None,
    quarter_id: Optional[UUID] = None,
) -> List[ExtraChargeResponse]:
    stmt = select(ExtraCharge)
    if student_id is not None:
        stmt = stmt.where(ExtraCharge.student_id == student_id)
    if class_id is not None:
        stmt = stmt.where(ExtraCharge.class_id == class_id)
    if quarter_id is not None:
        stmt = stmt.where(ExtraCharge.quarter_id == quarter_id)
    stmt = stmt.order_by(ExtraCharge.created_at.desc())
    result = await db.execute(stmt)
    return [ExtraChargeResponse.model_validate(c) for c in result.scalars().all()]


async def delete_extra_charge(db: AsyncSession, charge_id: UUID) -> None:
    charge = await db.get(ExtraCharge, charge_id)
    if not charge:
        raise NotFoundError("Extra charge not found")
    await db.delete(charge)
    await db.commit()
    logger.info("Deleted extra charge %s", charge_id)
