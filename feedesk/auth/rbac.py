from uuid import UUID

from fastapi import Depends, HTTPException, status

from feedesk.auth.dependencies import get_current_user
from feedesk.auth.schemas import CurrentUser
from feedesk.core.enums import UserRole

STAFF_ROLES = (UserRole.ADMIN, UserRole.CASHIER)


def require_roles(*roles: UserRole):
    """
    Dependency factory restricting an endpoint to the given roles.

    Example:
        Depends(require_roles(UserRole.ADMIN))
    """

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _checker


def ensure_student_access(current_user: CurrentUser, student_id: UUID) -> None:
    """Staff see every student; parents only the students linked to their account."""
    if current_user.role in STAFF_ROLES:
        return
    if student_id not in current_user.student_ids:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
