"""
JWT token handling.

Tokens are issued by the identity service and presented as
``Authorization: Bearer <token>``. This module only needs to verify them;
``create_access_token`` exists for tooling and tests that must mint one.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from noticeboard.config import settings

# JWT configuration
ALGORITHM = "HS256"
TOKEN_TYPE = "access"


def create_access_token(
    user_id: int,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: User's database ID
        role: User's role (admin/faculty/student)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)

    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": expire,
        "type": TOKEN_TYPE,
        "iat": datetime.now(timezone.utc),
    }

    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """
    Verify and decode a JWT token.

    Returns:
        Dict with 'user_id' and 'role', or None if the token is
        invalid, expired, or not an access token
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
        )
    except JWTError:
        return None

    if payload.get("type") != TOKEN_TYPE:
        return None

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        return None

    try:
        return {
            "user_id": int(user_id),
            "role": role,
        }
    except ValueError:
        return None


def get_token_from_request(request) -> Optional[str]:
    """
    Extract the bearer token from the Authorization header.

    Returns:
        Token string or None
    """
    header = request.headers.get("Authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
