"""
Authentication Router
Endpoints for sign up, login, logout and the caller's own account.
"""

import secrets

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from creditdesk.api.dependencies import ACCESS_TOKEN_COOKIE, get_current_user
from creditdesk.config import settings
from creditdesk.core.rate_limit import limiter
from creditdesk.database import get_db
from creditdesk.models.user import User
from creditdesk.schemas.user import PasswordChange, ProfileUpdate, UserLogin, UserRegister, UserResponse
from creditdesk.services import auth_service
from creditdesk.services.user_service import UserService

router = APIRouter()


def _set_csrf_cookie(response: Response) -> str:
    """Generate a CSRF token, set it as a cookie, and return the token."""
    token = secrets.token_urlsafe(32)
    if settings.csrf_enabled:
        response.set_cookie(
            key=settings.csrf_cookie_name,
            value=token,
            httponly=False,
            secure=settings.csrf_cookie_secure,
            samesite=settings.csrf_cookie_samesite,
            max_age=settings.csrf_cookie_max_age,
        )
        response.headers[settings.csrf_header_name] = token
    return token


def _start_session(response: Response, user: User) -> None:
    access_token = auth_service.create_access_token(user.id)
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        httponly=True,
        max_age=settings.cookie_max_age,
        samesite=settings.cookie_samesite,
        secure=settings.cookie_secure,
    )
    _set_csrf_cookie(response)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit_register)
async def register(
    request: Request,
    user_data: UserRegister,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """
    Self-service registration. Creates a regular account and signs it in.
    """
    user = await UserService(db).create(
        email=user_data.email,
        password=user_data.password,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
    )
    _start_session(response, user)
    return user


@router.post("/login", response_model=UserResponse)
@limiter.limit(settings.rate_limit_login)
async def login(
    request: Request,
    login_data: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """
    Authenticate user and set HTTP-only JWT cookie.
    Blocked accounts can sign in; they are refused at spending time.
    """
    user = await UserService(db).authenticate(login_data.email, login_data.password)
    _start_session(response, user)
    return user


@router.post("/logout")
async def logout(response: Response):
    """
    Clear authentication cookie.
    """
    response.delete_cookie(
        key=ACCESS_TOKEN_COOKIE,
        samesite=settings.cookie_samesite,
        secure=settings.cookie_secure,
    )
    if settings.csrf_enabled:
        response.delete_cookie(
            key=settings.csrf_cookie_name,
            samesite=settings.csrf_cookie_samesite,
            secure=settings.csrf_cookie_secure,
        )
    return {"message": "Successfully logged out"}


@router.get("/me", response_model=UserResponse)
async def get_me(response: Response, user: User = Depends(get_current_user)):
    """
    Current user, including the live credit balance.
    Also refreshes CSRF token.
    """
    _set_csrf_cookie(response)
    return user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    return await UserService(db).update_profile(
        user.id, first_name=profile.first_name, last_name=profile.last_name
    )


@router.put("/password")
async def change_password(
    data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    await UserService(db).change_password(user.id, data.current_password, data.new_password)
    return {"message": "Password updated"}
