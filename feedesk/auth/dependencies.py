from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from feedesk.auth.schemas import CurrentUser
from feedesk.auth.security import decode_access_token
from feedesk.core.enums import UserRole


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=True)


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Resolve the caller from the bearer token. Sessions and login live with the auth provider."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub") or payload.get("user_id")
    role_name = payload.get("role")
    if not user_id or not role_name:
        raise credentials_exception
    try:
        role = UserRole(str(role_name).lower())
        student_ids = [UUID(str(s)) for s in payload.get("student_ids") or []]
    except ValueError:
        raise credentials_exception

    return CurrentUser(id=str(user_id), role=role, student_ids=student_ids)
