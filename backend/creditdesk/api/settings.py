"""
Settings Router
Runtime system settings such as the per-search credit cost.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from creditdesk.api.dependencies import get_current_user, require_admin
from creditdesk.database import get_db
from creditdesk.models.user import User
from creditdesk.schemas.settings import AppSettings, SearchCostResponse
from creditdesk.services.settings_service import SettingsService

router = APIRouter()


@router.get("/search-cost", response_model=SearchCostResponse)
async def get_search_cost(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """Credits charged per search. Available to every signed-in user."""
    current = await SettingsService(db).get()
    return SearchCostResponse(search_cost=current.search_cost)


@router.get("/", response_model=AppSettings)
async def get_settings(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Get current system settings."""
    return await SettingsService(db).get()


@router.put("/", response_model=AppSettings)
async def update_settings(
    new_settings: AppSettings,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Update system settings."""
    return await SettingsService(db).update(new_settings)
