"""
User Schemas
Pydantic models for user-related data.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from creditdesk.models.user import UserRole, UserStatus
from creditdesk.utils.password_policy import validate_password


def _check_password(v: str) -> str:
    errors = validate_password(v)
    if errors:
        raise ValueError("; ".join(errors))
    return v


class UserBase(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^\s*[^@\s]+@[^@\s]+\.[^@\s]+\s*$")
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)


class UserRegister(UserBase):
    """Self-service sign up. Always creates a regular account with no credits."""
    password: str

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return _check_password(v)


class UserCreate(UserRegister):
    """Admin-created account."""
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.REGULAR
    credits: int = Field(0, ge=0)


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[UserRole] = None


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    status: UserStatus
    credits: int
    credit_limit: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserStats(BaseModel):
    total_users: int
    active_users: int
    blocked_users: int
    total_credits: int


class UserLogin(BaseModel):
    email: str
    password: str
