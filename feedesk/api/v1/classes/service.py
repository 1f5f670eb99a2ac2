from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.billing.money import to_money
from feedesk.core.exceptions import ConflictError, NotFoundError
from feedesk.core.models import SchoolClass

from .schemas import ClassCreate, ClassResponse, ClassUpdate


def _class_to_response(c: SchoolClass) -> ClassResponse:
    return ClassResponse(
        id=c.id,
        class_name=c.class_name,
        display_order=c.display_order,
        quarterly_fee=to_money(c.quarterly_fee),
        is_active=c.is_active,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


async def create_class(db: AsyncSession, payload: ClassCreate) -> ClassResponse:
    try:
        obj = SchoolClass(
            class_name=payload.class_name.strip(),
            display_order=payload.display_order,
            quarterly_fee=to_money(payload.quarterly_fee),
            is_active=True,
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
        return _class_to_response(obj)
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Class name already exists")


async def list_classes(db: AsyncSession, active_only: bool = True) -> List[ClassResponse]:
    stmt = select(SchoolClass)
    if active_only:
        stmt = stmt.where(SchoolClass.is_active.is_(True))
    stmt = stmt.order_by(SchoolClass.display_order.nullslast(), SchoolClass.class_name)
    result = await db.execute(stmt)
    return [_class_to_response(c) for c in result.scalars().all()]


async def update_class(db: AsyncSession, class_id: UUID, payload: ClassUpdate) -> ClassResponse:
    obj = await db.get(SchoolClass, class_id)
    if not obj:
        raise NotFoundError("Class not found")
    if payload.class_name is not None:
        obj.class_name = payload.class_name.strip()
    if payload.display_order is not None:
        obj.display_order = payload.display_order
    if payload.quarterly_fee is not None:
        obj.quarterly_fee = to_money(payload.quarterly_fee)
    if payload.is_active is not None:
        obj.is_active = payload.is_active
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Class name already exists")
    await db.refresh(obj)
    return _class_to_response(obj)
