"""Fee structure service: one line-item base fee per (class, quarter)."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.billing.fee_structures import component_total
from feedesk.billing.money import to_money
from feedesk.core.exceptions import ConflictError, NotFoundError, ValidationFailed
from feedesk.core.models import FeeStructure, Quarter, SchoolClass
from feedesk.core.models.fee_structure import COMPONENT_FIELDS

from .schemas import FeeStructureCreate, FeeStructureResponse, FeeStructureUpdate

logger = logging.getLogger(__name__)


def _fs_to_response(fs: FeeStructure) -> FeeStructureResponse:
    return FeeStructureResponse(
        id=fs.id,
        class_id=fs.class_id,
        quarter_id=fs.quarter_id,
        total_fee=to_money(fs.total_fee),
        created_at=fs.created_at,
        updated_at=fs.updated_at,
        **{f: to_money(getattr(fs, f)) for f in COMPONENT_FIELDS},
    )


async def create_fee_structure(db: AsyncSession, payload: FeeStructureCreate) -> FeeStructureResponse:
    if not await db.get(SchoolClass, payload.class_id):
        raise ValidationFailed("Invalid class")
    if not await db.get(Quarter, payload.quarter_id):
        raise ValidationFailed("Invalid quarter")
    components = {f: to_money(getattr(payload, f)) for f in COMPONENT_FIELDS}
    try:
        fs = FeeStructure(
            class_id=payload.class_id,
            quarter_id=payload.quarter_id,
            total_fee=component_total(**components),
            **components,
        )
        db.add(fs)
        await db.commit()
        await db.refresh(fs)
    except IntegrityError:
        await db.rollback()
        raise ConflictError("This class already has a fee structure for this quarter")
    logger.info("Created fee structure %s total=%s", fs.id, fs.total_fee)
    return _fs_to_response(fs)


async def update_fee_structure(
    db: AsyncSession,
    fee_structure_id: UUID,
    payload: FeeStructureUpdate,
) -> FeeStructureResponse:
    fs = await db.get(FeeStructure, fee_structure_id)
    if not fs:
        raise NotFoundError("Fee structure not found")
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(fs, field, to_money(value))
    fs.total_fee = component_total(**{f: getattr(fs, f) for f in COMPONENT_FIELDS})
    await db.commit()
    await db.refresh(fs)
    return _fs_to_response(fs)


async def list_fee_structures(
    db: AsyncSession,
    class_id: Optional[UUID] = None,
    quarter_id: Optional[UUID] = None,
) -> List[FeeStructureResponse]:
    stmt = select(FeeStructure)
    if class_id is not None:
        stmt = stmt.where(FeeStructure.class_id == class_id)
    if quarter_id is not None:
        stmt = stmt.where(FeeStructure.quarter_id == quarter_id)
    stmt = stmt.order_by(FeeStructure.created_at.desc())
    result = await db.execute(stmt)
    return [_fs_to_response(fs) for fs in result.scalars().all()]
