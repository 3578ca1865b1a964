"""
API Dependencies
Reusable FastAPI dependencies for endpoint protection.
"""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from creditdesk.database import get_db
from creditdesk.models.user import User
from creditdesk.services import auth_service

ACCESS_TOKEN_COOKIE = "access_token"


async def get_current_user_optional(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> User | None:
    """
    Extract user from JWT in HTTP-only cookie.
    Returns None if token is missing or invalid.
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        return None

    user_id = auth_service.decode_access_token(token)
    if user_id is None:
        return None

    return await db.get(User, user_id)


async def get_current_user(
    user: User | None = Depends(get_current_user_optional)
) -> User:
    """
    Dependency that enforces authentication.
    Blocked users still pass so the client can show them their account state.
    """
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_active_user(user: User = Depends(get_current_user)) -> User:
    """Dependency for actions a blocked account may not perform."""
    if user.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is blocked",
        )
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Dependency that enforces admin privileges.
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    if user.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is blocked",
        )
    return user
