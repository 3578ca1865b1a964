"""
Search Record Service
Append-only record of submitted searches plus the credit-spending flow that
creates them.
"""

import enum
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creditdesk.exceptions import ForbiddenError, InvalidArgumentError, NotFoundError, ProviderError
from creditdesk.models.search import Search
from creditdesk.models.user import User
from creditdesk.services.ledger_service import LedgerService
from creditdesk.services.search_provider import SearchProviderClient
from creditdesk.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

# Unfinished searches older than this are shown as expired
SEARCH_EXPIRY = timedelta(hours=6)


class SearchStatus(str, enum.Enum):
    PROCESSING = "processing"
    FINALIZED = "finalized"
    EXPIRED = "expired"


def is_expired(search: Search, now: Optional[datetime] = None) -> bool:
    if search.finalizado:
        return False
    now = now or datetime.utcnow()
    return now - search.created_at > SEARCH_EXPIRY


def display_status(search: Search, now: Optional[datetime] = None) -> SearchStatus:
    """Status derived at read time; nothing here is ever persisted."""
    if search.finalizado:
        return SearchStatus.FINALIZED
    if is_expired(search, now):
        return SearchStatus.EXPIRED
    return SearchStatus.PROCESSING


def download_filename(search: Search) -> str:
    """``[segment] - address - DD-MM-YYYY.xlsx``"""
    date = (search.created_at or datetime.utcnow()).strftime("%d-%m-%Y")
    return f"[{search.segment}] - {search.address} - {date}.xlsx"


class SearchService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        user_id: int,
        external_search_id: str,
        address: str,
        segment: str,
        credits_used: int,
        cep: Optional[str] = None,
        commit: bool = True,
    ) -> Search:
        search = Search(
            search_id=external_search_id,
            user_id=user_id,
            address=address,
            segment=segment,
            cep=cep,
            credits_used=credits_used,
            finalizado=False,
        )
        self.db.add(search)
        await self.db.flush()
        if commit:
            await self.db.commit()
        return search

    async def _get(self, search_pk: int) -> Search:
        search = await self.db.get(Search, search_pk)
        if not search:
            raise NotFoundError(f"Search with id {search_pk} not found")
        return search

    async def mark_finalized(self, search_pk: int) -> Search:
        search = await self._get(search_pk)
        if not search.finalizado:
            search.finalizado = True
            await self.db.commit()
            logger.info("Search %s (%s) finalized", search.id, search.search_id)
        return search

    async def list_for_user(self, user_id: int) -> List[Search]:
        result = await self.db.execute(
            select(Search)
            .where(Search.user_id == user_id)
            .order_by(Search.created_at.desc(), Search.id.desc())
        )
        return list(result.scalars().all())

    async def get_for_user(self, user_id: int, search_pk: int) -> Search:
        search = await self.db.get(Search, search_pk)
        if not search or search.user_id != user_id:
            raise NotFoundError(f"Search with id {search_pk} not found")
        return search

    async def submit_search(
        self,
        user: User,
        address: str,
        segment: str,
        provider: SearchProviderClient,
        cep: Optional[str] = None,
    ) -> Search:
        """
        Spend credits on a new lookup.

        The provider is called before anything is written; if it fails the
        user is not charged. The balance is checked again under the row lock
        when debiting, so a balance spent elsewhere during the provider call
        is refused rather than clamped. The debit and the search record are
        committed together.
        """
        if user.is_blocked:
            raise ForbiddenError("Account is blocked")

        cost = (await SettingsService(self.db).get()).search_cost
        if user.credits < cost:
            raise InvalidArgumentError(
                f"Insufficient credits: {cost} required, {user.credits} available"
            )

        submission = await provider.submit(address, segment, cep)
        if not submission.success or not submission.id:
            raise ProviderError("Search provider did not accept the search")

        try:
            await LedgerService(self.db).apply_adjustment(
                user.id,
                -cost,
                actor_id=None,
                note=f"Search {submission.id}",
                commit=False,
                require_funds=True,
            )
            search = await self.record(
                user.id, submission.id, address, segment, cost, cep=cep, commit=False
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("User %s started search %s for %d credits", user.id, submission.id, cost)
        return search

    async def refresh_status(self, user_id: int, search_pk: int, provider: SearchProviderClient) -> Search:
        """Ask the provider about an unfinished search and record completion."""
        search = await self.get_for_user(user_id, search_pk)
        if search.finalizado:
            return search
        if await provider.is_finished(search.search_id):
            search = await self.mark_finalized(search.id)
        return search

    async def download(self, user_id: int, search_pk: int, provider: SearchProviderClient) -> tuple[Search, bytes]:
        search = await self.get_for_user(user_id, search_pk)
        if not search.finalizado:
            raise InvalidArgumentError("Search results are not ready yet")
        return search, await provider.download(search.search_id)
