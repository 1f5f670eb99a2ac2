from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.auth.dependencies import get_current_user
from feedesk.auth.rbac import require_roles
from feedesk.auth.schemas import CurrentUser
from feedesk.core.enums import UserRole
from feedesk.core.exceptions import ServiceError
from feedesk.db.session import get_db

from .schemas import LateFeePolicyUpdate, QuarterCreate, QuarterResponse
from . import service

router = APIRouter(prefix="/api/v1/quarters", tags=["quarters"])


@router.post(
    "",
    response_model=QuarterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def create_quarter(
    payload: QuarterCreate,
    db: AsyncSession = Depends(get_db),
) -> QuarterResponse:
    try:
        return await service.create_quarter(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[QuarterResponse])
async def list_quarters(
    academic_year: Optional[str] = Query(None, description="e.g. 2024-25"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[QuarterResponse]:
    return await service.list_quarters(db, academic_year=academic_year)


@router.patch(
    "/{quarter_id}/late-fee",
    response_model=QuarterResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def update_late_fee_policy(
    quarter_id: UUID,
    payload: LateFeePolicyUpdate,
    db: AsyncSession = Depends(get_db),
) -> QuarterResponse:
    try:
        return await service.update_late_fee_policy(db, quarter_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
