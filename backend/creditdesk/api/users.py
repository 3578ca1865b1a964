"""
Users Router
Admin-only account management: directory edits, credit adjustments,
credit limits and block/unblock.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from creditdesk.api.dependencies import require_admin
from creditdesk.database import get_db
from creditdesk.models.user import User, UserStatus
from creditdesk.schemas.credit import CreditAdjustment, CreditLimitUpdate, CreditTransactionResponse
from creditdesk.schemas.user import UserCreate, UserResponse, UserStats, UserUpdate
from creditdesk.services.ledger_service import LedgerService
from creditdesk.services.user_service import UserService

router = APIRouter()


@router.get("/", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    List regular users, newest first.
    """
    return await UserService(db).list_regular()


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Create a user. Initial credits are recorded in the ledger.
    """
    return await UserService(db).create(
        email=user_data.email,
        password=user_data.password,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        role=user_data.role,
        credits=user_data.credits,
        actor_id=admin.id,
    )


@router.get("/stats", response_model=UserStats)
async def get_user_stats(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Totals over regular accounts.
    """
    return await UserService(db).stats()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await UserService(db).get(user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    update_data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Update names or role. Credits, email and password are not editable here.
    """
    return await UserService(db).admin_update(
        user_id,
        first_name=update_data.first_name,
        last_name=update_data.last_name,
        role=update_data.role,
    )


@router.post("/{user_id}/credits", response_model=UserResponse)
async def adjust_credits(
    user_id: int,
    adjustment: CreditAdjustment,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Add or remove credits. Removals are clamped at a zero balance.
    """
    return await LedgerService(db).apply_adjustment(
        user_id, adjustment.amount, actor_id=admin.id, note=adjustment.note
    )


@router.patch("/{user_id}/credit-limit", response_model=UserResponse)
async def set_credit_limit(
    user_id: int,
    data: CreditLimitUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await LedgerService(db).set_limit(user_id, data.limit)


@router.get("/{user_id}/credit-transactions", response_model=List[CreditTransactionResponse])
async def list_credit_transactions(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await LedgerService(db).history(user_id)


@router.post("/{user_id}/block", response_model=UserResponse)
async def block_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await UserService(db).set_status(user_id, UserStatus.BLOCKED)


@router.post("/{user_id}/unblock", response_model=UserResponse)
async def unblock_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await UserService(db).set_status(user_id, UserStatus.ACTIVE)
