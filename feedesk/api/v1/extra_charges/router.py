from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from feedesk.auth.rbac import STAFF_ROLES, require_roles
from feedesk.auth.schemas import CurrentUser
from feedesk.core.enums import UserRole
from feedesk.core.exceptions import ServiceError
from feedesk.db.session import get_db

from .schemas import ExtraChargeCreate, ExtraChargeResponse
from . import service

router = APIRouter(prefix="/api/v1/extra-charges", tags=["extra-charges"])


@router.post(
    "",
    response_model=ExtraChargeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_extra_charge(
    payload: ExtraChargeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
) -> ExtraChargeResponse:
    try:
        return await service.create_extra_charge(db, payload, created_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[ExtraChargeResponse],
    dependencies=[Depends(require_roles(*STAFF_ROLES))],
)
async def list_extra_charges(
    student_id: Optional[UUID] = Query(None),
    class_id: Optional[UUID] = Query(None),
    quarter_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[ExtraChargeResponse]:
    return await service.list_extra_charges(
        db, student_id=student_id, class_id=class_id, quarter_id=quarter_id
    )


@router.delete(
    "/{charge_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def delete_extra_charge(
    charge_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        await service.delete_extra_charge(db, charge_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
