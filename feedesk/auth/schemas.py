from typing import List
from uuid import UUID

from pydantic import BaseModel, Field

from feedesk.core.enums import UserRole


class CurrentUser(BaseModel):
    """Identity carried by the access token issued by the external auth provider."""

    id: str
    role: UserRole
    student_ids: List[UUID] = Field(default_factory=list)  # parents only
