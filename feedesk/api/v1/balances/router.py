"""Balances router: student fee details (admin, cashier, parent portal), defaulters and their export, dashboard summary."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.auth.dependencies import get_current_user
from feedesk.auth.rbac import STAFF_ROLES, ensure_student_access, require_roles
from feedesk.auth.schemas import CurrentUser
from feedesk.billing.engine import BalanceEngine
from feedesk.billing.schemas import StudentFeeDetails
from feedesk.core.exceptions import ServiceError
from feedesk.db.session import get_db

from .dependencies import get_balance_engine
from .schemas import CollectionSummary, DefaulterItem
from . import service

router = APIRouter(prefix="/api/v1/balances", tags=["balances"])


@router.get("/students/{student_id}", response_model=StudentFeeDetails)
async def get_student_fee_details(
    student_id: UUID,
    as_of: Optional[date] = Query(None, description="Defaults to today"),
    academic_year: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    engine: BalanceEngine = Depends(get_balance_engine),
    current_user: CurrentUser = Depends(get_current_user),
) -> StudentFeeDetails:
    ensure_student_access(current_user, student_id)
    try:
        return await service.get_student_fee_details(
            db, engine, student_id, as_of=as_of, academic_year=academic_year
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/defaulters",
    response_model=List[DefaulterItem],
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def list_defaulters(
    quarter_id: UUID,
    class_id: Optional[UUID] = Query(None),
    as_of: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    engine: BalanceEngine = Depends(get_balance_engine),
) -> List[DefaulterItem]:
    try:
        return await service.list_defaulters(db, engine, quarter_id, class_id=class_id, as_of=as_of)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/defaulters/export",
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def export_defaulters(
    quarter_id: UUID,
    class_id: Optional[UUID] = Query(None),
    as_of: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    engine: BalanceEngine = Depends(get_balance_engine),
) -> Response:
    """Defaulters for a quarter as an Excel sheet, for reminder calls and mail merges."""
    try:
        items = await service.list_defaulters(db, engine, quarter_id, class_id=class_id, as_of=as_of)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(
        content=service.build_defaulters_excel(items),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=defaulters.xlsx"},
    )


@router.get(
    "/summary",
    response_model=CollectionSummary,
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def collection_summary(
    as_of: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    engine: BalanceEngine = Depends(get_balance_engine),
) -> CollectionSummary:
    try:
        return await service.collection_summary(db, engine, as_of=as_of)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
