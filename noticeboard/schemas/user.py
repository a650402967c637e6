"""User schemas."""

from typing import Optional

from pydantic import BaseModel

from noticeboard.models import UserRole


class UserSummary(BaseModel):
    """Author/actor fields embedded in notices and comments."""

    id: int
    name: str
    role: UserRole
    department: Optional[str] = None

    model_config = {"from_attributes": True}
