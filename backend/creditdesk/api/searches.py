"""
Searches Router
Submit paid lookups, check their progress and download results.
"""

from typing import List
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from creditdesk.api.dependencies import get_current_user, require_active_user
from creditdesk.config import settings
from creditdesk.core.rate_limit import limiter
from creditdesk.database import get_db
from creditdesk.models.user import User
from creditdesk.schemas.search import SearchCreate, SearchResponse
from creditdesk.services.search_provider import SearchProviderClient, get_search_provider
from creditdesk.services.search_service import SearchService, download_filename

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/", response_model=List[SearchResponse])
async def list_searches(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """
    The caller's searches, newest first. ``status`` is computed per request.
    """
    searches = await SearchService(db).list_for_user(user.id)
    return [SearchResponse.from_model(s) for s in searches]


@router.post("/", response_model=SearchResponse, status_code=status.HTTP_201_CREATED)
async def create_search(
    data: SearchCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_active_user),
    provider: SearchProviderClient = Depends(get_search_provider),
):
    """
    Submit a lookup to the provider and charge the configured search cost.
    """
    search = await SearchService(db).submit_search(
        user, data.address, data.segment, provider, cep=data.cep
    )
    return SearchResponse.from_model(search)


@router.post("/{search_id}/refresh", response_model=SearchResponse)
@limiter.limit(settings.rate_limit_search_refresh)
async def refresh_search(
    request: Request,
    search_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    provider: SearchProviderClient = Depends(get_search_provider),
):
    """
    Check with the provider whether results are ready.
    Rate limited; the provider is not polled automatically.
    """
    search = await SearchService(db).refresh_status(user.id, search_id, provider)
    return SearchResponse.from_model(search)


@router.get("/{search_id}/download")
async def download_search(
    search_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    provider: SearchProviderClient = Depends(get_search_provider),
):
    search, content = await SearchService(db).download(user.id, search_id, provider)
    filename = download_filename(search)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
