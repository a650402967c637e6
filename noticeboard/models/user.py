"""
User model referenced by notices, comments and notifications.

Accounts are provisioned by the identity service; this service only reads
them to resolve the current actor and to pick notification recipients.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import Mapped, mapped_column

from noticeboard.models.base import BaseModel


class UserRole(str, Enum):
    """User roles for access control."""
    ADMIN = "admin"
    FACULTY = "faculty"
    STUDENT = "student"


class User(BaseModel):
    """
    User account model.

    - admin: sees every notice, may edit or delete anything
    - faculty: publishes notices, sees own department + institution-wide
    - student: sees own department + institution-wide, narrowed by year
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        SQLAlchemyEnum(
            UserRole,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    department: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )
    # Only meaningful for students, e.g. "3rd Year"
    year: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
