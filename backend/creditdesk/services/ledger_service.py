"""
Credit Ledger Service
Applies signed credit adjustments to a user's balance together with an
immutable audit record, and exposes the transaction history.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creditdesk.exceptions import InvalidArgumentError, NotFoundError
from creditdesk.models.credit_transaction import CreditTransaction
from creditdesk.models.user import User

logger = logging.getLogger(__name__)


def clamp_balance(previous: int, amount: int) -> int:
    """Balance after applying ``amount``. Debits never take it below zero."""
    return max(0, previous + amount)


def replay_balance(transactions: Iterable[CreditTransaction]) -> int:
    """Fold a transaction trail (oldest first) starting from a zero balance."""
    balance = 0
    for tx in transactions:
        balance = clamp_balance(balance, tx.amount)
    return balance


def _require_int(value, name: str) -> int:
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer")
    return value


def locked_user_query(user_id: int):
    """SELECT ... FOR UPDATE on one user row, overwriting any cached copy in the session."""
    return (
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


class LedgerService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _lock_user(self, user_id: int) -> User:
        result = await self.db.execute(locked_user_query(user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError(f"User with id {user_id} not found")
        return user

    async def apply_adjustment(
        self,
        user_id: int,
        amount: int,
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
        commit: bool = True,
        require_funds: bool = False,
    ) -> User:
        """
        Add ``amount`` (negative to debit) to the user's balance.

        The balance write and the audit row are flushed together. With
        ``commit=False`` the caller owns the transaction and must commit or
        roll back.

        Debits are clamped at zero. With ``require_funds`` a debit larger than
        the locked balance is refused instead, and nothing is written.
        """
        _require_int(amount, "Amount")

        try:
            user = await self._lock_user(user_id)
            previous = user.credits
            if require_funds and amount < 0 and previous < -amount:
                raise InvalidArgumentError(
                    f"Insufficient credits: {-amount} required, {previous} available"
                )
            new_balance = clamp_balance(previous, amount)

            user.credits = new_balance
            user.updated_at = datetime.utcnow()
            self.db.add(CreditTransaction(
                user_id=user.id,
                amount=amount,
                previous_balance=previous,
                new_balance=new_balance,
                note=note,
                admin_id=actor_id,
            ))
            await self.db.flush()

            if commit:
                await self.db.commit()
        except Exception:
            if commit:
                await self.db.rollback()
            raise

        logger.info(
            "Credits adjusted for user %s: %+d (%d -> %d) by %s",
            user_id, amount, previous, new_balance, actor_id if actor_id is not None else "self",
        )
        return user

    async def set_limit(self, user_id: int, limit: int) -> User:
        """
        Set the advisory credit limit. The ledger itself never enforces it.
        """
        _require_int(limit, "Credit limit")
        if limit < 0:
            raise InvalidArgumentError("Credit limit must be a non-negative number")

        user = await self._lock_user(user_id)
        user.credit_limit = limit
        user.updated_at = datetime.utcnow()
        await self.db.commit()

        logger.info("Credit limit for user %s set to %d", user_id, limit)
        return user

    async def history(self, user_id: int) -> List[CreditTransaction]:
        """All transactions for the user, newest first."""
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError(f"User with id {user_id} not found")

        result = await self.db.execute(
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id.desc())
        )
        return list(result.scalars().all())
