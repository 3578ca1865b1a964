"""
User Model
Stores account identity, role, status and the live credit balance.
"""

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Enum, Index, CheckConstraint
from creditdesk.database import Base


class UserRole(str, enum.Enum):
    """Account roles."""
    ADMIN = "admin"
    REGULAR = "regular"


class UserStatus(str, enum.Enum):
    """Account status. Blocked users can sign in but cannot spend credits."""
    ACTIVE = "active"
    BLOCKED = "blocked"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    """
    User model for authentication and credit accounting.

    ``credits`` is written only through the ledger service.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False)
    hashed_password = Column(String(1024), nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=_enum_values),
        default=UserRole.REGULAR,
        nullable=False,
    )
    status = Column(
        Enum(UserStatus, name="user_status", values_callable=_enum_values),
        default=UserStatus.ACTIVE,
        nullable=False,
    )
    credits = Column(Integer, default=0, nullable=False)
    credit_limit = Column(Integer, default=100, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_users_email', 'email', unique=True),
        CheckConstraint('credits >= 0', name='ck_users_credits_non_negative'),
        CheckConstraint('credit_limit >= 0', name='ck_users_credit_limit_non_negative'),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_blocked(self) -> bool:
        return self.status == UserStatus.BLOCKED

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
