from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.core.exceptions import ConflictError, NotFoundError
from feedesk.core.models import Quarter

from .schemas import LateFeePolicyUpdate, QuarterCreate, QuarterResponse

POLICY_FIELDS = (
    "late_fee_type",
    "late_fee_amount",
    "late_fee_percentage",
    "grace_period_days",
    "apply_daily",
    "max_late_fee",
)


def _policy_value(value):
    return value.value if hasattr(value, "value") else value


async def create_quarter(db: AsyncSession, payload: QuarterCreate) -> QuarterResponse:
    try:
        q = Quarter(
            academic_year=payload.academic_year.strip(),
            quarter_name=payload.quarter_name.strip().upper(),
            quarter_number=payload.quarter_number,
            start_date=payload.start_date,
            end_date=payload.end_date,
            due_date=payload.due_date,
            is_active=True,
            **{f: _policy_value(getattr(payload, f)) for f in POLICY_FIELDS},
        )
        db.add(q)
        await db.commit()
        await db.refresh(q)
        return QuarterResponse.model_validate(q)
    except IntegrityError:
        await db.rollback()
        raise ConflictError("This quarter already exists for the academic year")


async def list_quarters(db: AsyncSession, academic_year: Optional[str] = None) -> List[QuarterResponse]:
    stmt = select(Quarter).where(Quarter.is_active.is_(True))
    if academic_year:
        stmt = stmt.where(Quarter.academic_year == academic_year)
    stmt = stmt.order_by(Quarter.start_date, Quarter.quarter_number)
    result = await db.execute(stmt)
    return [QuarterResponse.model_validate(q) for q in result.scalars().all()]


async def update_late_fee_policy(
    db: AsyncSession,
    quarter_id: UUID,
    payload: LateFeePolicyUpdate,
) -> QuarterResponse:
    """Only fields present in the payload change; an explicit null resets a field to the default."""
    q = await db.get(Quarter, quarter_id)
    if not q:
        raise NotFoundError("Quarter not found")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(q, field, _policy_value(value))
    await db.commit()
    await db.refresh(q)
    return QuarterResponse.model_validate(q)
