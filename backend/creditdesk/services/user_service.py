"""
User Directory Service
Account identity and state: creation, profile edits, status changes and
aggregate statistics.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from creditdesk.config import settings
from creditdesk.exceptions import ConflictError, InvalidArgumentError, NotFoundError, UnauthorizedError
from creditdesk.models.user import User, UserRole, UserStatus
from creditdesk.schemas.user import UserStats
from creditdesk.services import auth_service
from creditdesk.services.ledger_service import LedgerService
from creditdesk.utils.emails import normalize_email
from creditdesk.utils.password_policy import validate_password

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError(f"User with id {user_id} not found")
        return user

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def list_regular(self) -> List[User]:
        result = await self.db.execute(
            select(User)
            .where(User.role == UserRole.REGULAR)
            .order_by(User.created_at.desc(), User.id.desc())
        )
        return list(result.scalars().all())

    async def create(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: UserRole = UserRole.REGULAR,
        credits: int = 0,
        actor_id: Optional[int] = None,
    ) -> User:
        """
        Register a new account. Initial credits go through the ledger so the
        audit trail always reproduces the balance.
        """
        email = normalize_email(email)
        if await self.get_by_email(email):
            raise ConflictError("Email already registered")
        if credits < 0:
            raise InvalidArgumentError("Initial credits must be a non-negative number")

        user = User(
            email=email,
            hashed_password=auth_service.get_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            status=UserStatus.ACTIVE,
            credits=0,
            credit_limit=settings.default_credit_limit,
        )
        try:
            self.db.add(user)
            await self.db.flush()
            if credits:
                await LedgerService(self.db).apply_adjustment(
                    user.id, credits, actor_id=actor_id, note="Initial credits", commit=False
                )
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise ConflictError("Email already registered") from exc
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(user)
        logger.info("Created %s user %s (id=%s)", user.role.value, user.email, user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.get_by_email(email)
        if not user or not auth_service.verify_password(password, user.hashed_password):
            raise UnauthorizedError("Incorrect email or password")
        return user

    async def update_profile(
        self,
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Partial name update. Email, password and credits are never touched here."""
        user = await self.get(user_id)
        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        user.updated_at = datetime.utcnow()
        await self.db.commit()
        return user

    async def admin_update(
        self,
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> User:
        user = await self.get(user_id)

        if role is not None and role != user.role:
            if user.role == UserRole.ADMIN:
                # Prevent removing last admin role
                admin_count = (await self.db.execute(
                    select(func.count(User.id)).where(User.role == UserRole.ADMIN)
                )).scalar() or 0
                if admin_count <= 1:
                    raise InvalidArgumentError("Cannot downgrade the last administrator")
            user.role = role

        return await self.update_profile(user.id, first_name=first_name, last_name=last_name)

    async def set_status(self, user_id: int, status: UserStatus) -> User:
        """Block or unblock. Setting the current status again is a no-op."""
        user = await self.get(user_id)
        if user.status == status:
            return user

        user.status = status
        user.updated_at = datetime.utcnow()
        await self.db.commit()
        logger.info("User %s status changed to %s", user_id, status.value)
        return user

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        user = await self.get(user_id)
        if not auth_service.verify_password(current_password, user.hashed_password):
            raise InvalidArgumentError("Current password is incorrect")

        errors = validate_password(new_password)
        if errors:
            raise InvalidArgumentError("; ".join(errors))

        user.hashed_password = auth_service.get_password_hash(new_password)
        user.updated_at = datetime.utcnow()
        await self.db.commit()
        logger.info("Password changed for user %s", user_id)

    async def stats(self) -> UserStats:
        """Totals over regular accounts; admins are excluded."""
        stmt = select(
            func.count(User.id),
            func.coalesce(func.sum(case((User.status == UserStatus.ACTIVE, 1), else_=0)), 0),
            func.coalesce(func.sum(case((User.status == UserStatus.BLOCKED, 1), else_=0)), 0),
            func.coalesce(func.sum(User.credits), 0),
        ).where(User.role == UserRole.REGULAR)
        row = (await self.db.execute(stmt)).one()

        return UserStats(
            total_users=int(row[0]),
            active_users=int(row[1]),
            blocked_users=int(row[2]),
            total_credits=int(row[3]),
        )
