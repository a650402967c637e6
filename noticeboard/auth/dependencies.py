"""
FastAPI dependencies for authentication.

Every mutating route depends on ``get_current_user`` (or one of the role
guards built on it), so anonymous writes are rejected with 401. There is no
fallback identity. Tests swap the actor in through
``app.dependency_overrides[get_current_user]``.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from noticeboard.auth.jwt import get_token_from_request, verify_token
from noticeboard.db import get_db
from noticeboard.models import User, UserRole


async def load_active_user(db: AsyncSession, token: Optional[str]) -> Optional[User]:
    """Resolve a bearer token to an active user, or None."""
    if not token:
        return None

    payload = verify_token(token)
    if not payload:
        return None

    result = await db.execute(
        select(User).where(User.id == payload["user_id"])
    )
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        return None

    return user


async def get_current_user_optional(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Get current user from the bearer token if present.

    Returns None if no valid token found (doesn't raise error).
    Use for read routes that work with or without authentication.
    """
    return await load_active_user(db, get_token_from_request(request))


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user.

    Raises 401 if not authenticated or user is inactive.
    """
    token = get_token_from_request(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
        )

    user = await load_active_user(db, token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token or user not active.",
        )

    return user


async def require_author_role(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Require a user allowed to publish notices (admin or faculty).

    Raises 403 otherwise.
    """
    if current_user.role not in (UserRole.ADMIN, UserRole.FACULTY):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin or Faculty only.",
        )
    return current_user

