# tests/test_searches.py
from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from creditdesk.exceptions import ForbiddenError, InvalidArgumentError, NotFoundError, ProviderError
from creditdesk.models.search import Search
from creditdesk.models.user import User, UserStatus
from creditdesk.schemas.settings import AppSettings
from creditdesk.services.ledger_service import LedgerService
from creditdesk.services.search_service import (
    SEARCH_EXPIRY,
    SearchService,
    SearchStatus,
    display_status,
    download_filename,
    is_expired,
)
from creditdesk.services.settings_service import SettingsService
from creditdesk.services.user_service import UserService


def _search(created_at, finalizado=False):
    return Search(
        search_id="ext",
        user_id=1,
        address="Rua A, 10",
        segment="padarias",
        credits_used=10,
        finalizado=finalizado,
        created_at=created_at,
    )


def test_status_is_derived_from_age():
    now = datetime(2026, 10, 18, 12, 0, 0)

    fresh = _search(now - timedelta(hours=1))
    stale = _search(now - SEARCH_EXPIRY - timedelta(seconds=1))
    done = _search(now - timedelta(days=3), finalizado=True)

    assert display_status(fresh, now) == SearchStatus.PROCESSING
    assert display_status(stale, now) == SearchStatus.EXPIRED
    assert display_status(done, now) == SearchStatus.FINALIZED
    assert not is_expired(done, now)
    # nothing is written back
    assert stale.finalizado is False


def test_download_filename():
    search = _search(datetime(2026, 3, 5, 9, 30))

    assert download_filename(search) == "[padarias] - Rua A, 10 - 05-03-2026.xlsx"


async def test_record_starts_unfinalized(db, make_user):
    user = await make_user("rec@example.com")

    search = await SearchService(db).record(user.id, "ext-9", "Rua B", "mercados", 10)

    assert search.id is not None
    assert search.finalizado is False
    assert search.credits_used == 10


async def test_mark_finalized_is_idempotent(db, make_user):
    user = await make_user("fin@example.com")
    service = SearchService(db)
    search = await service.record(user.id, "ext-1", "Rua C", "bares", 10)

    assert (await service.mark_finalized(search.id)).finalizado is True
    assert (await service.mark_finalized(search.id)).finalizado is True


async def test_mark_finalized_unknown(db):
    with pytest.raises(NotFoundError):
        await SearchService(db).mark_finalized(77)


async def test_list_for_user_newest_first(db, make_user):
    alice = await make_user("a@example.com")
    bob = await make_user("b@example.com")
    service = SearchService(db)
    await service.record(alice.id, "ext-1", "Rua 1", "s1", 10)
    await service.record(bob.id, "ext-2", "Rua 2", "s2", 10)
    await service.record(alice.id, "ext-3", "Rua 3", "s3", 10)

    searches = await service.list_for_user(alice.id)

    assert [s.search_id for s in searches] == ["ext-3", "ext-1"]


async def test_get_for_user_hides_other_users_searches(db, make_user):
    alice = await make_user("a2@example.com")
    bob = await make_user("b2@example.com")
    search = await SearchService(db).record(alice.id, "ext-1", "Rua 1", "s1", 10)

    with pytest.raises(NotFoundError):
        await SearchService(db).get_for_user(bob.id, search.id)


async def test_submit_search_charges_cost_and_records(db, make_user, provider, provider_state):
    user = await make_user("spender@example.com", credits=25)
    provider_state["submit"] = {"success": True, "id": "abc-123"}

    search = await SearchService(db).submit_search(
        user, "Rua D, 1", "farmacias", provider, cep="01310100"
    )

    assert search.search_id == "abc-123"
    assert search.credits_used == 10
    assert search.cep == "01310100"
    assert (await db.get(User, user.id)).credits == 15

    latest = (await LedgerService(db).history(user.id))[0]
    assert latest.amount == -10
    assert latest.previous_balance == 25
    assert latest.new_balance == 15
    assert latest.admin_id is None

    sent = provider_state["requests"][0]
    assert sent.headers["Authorization"] == "Bearer test-token"


async def test_submit_search_uses_configured_cost(db, make_user, provider):
    await SettingsService(db).update(AppSettings(search_cost=3))
    user = await make_user("cheap@example.com", credits=5)

    search = await SearchService(db).submit_search(user, "Rua E", "academias", provider)

    assert search.credits_used == 3
    assert (await db.get(User, user.id)).credits == 2


async def test_submit_search_insufficient_credits(db, make_user, provider, provider_state):
    user = await make_user("poor@example.com", credits=9)

    with pytest.raises(InvalidArgumentError):
        await SearchService(db).submit_search(user, "Rua F", "lojas", provider)

    assert provider_state["requests"] == []
    assert (await db.get(User, user.id)).credits == 9


async def test_submit_search_rechecks_balance_spent_elsewhere(db, session_factory, make_user, provider):
    user = await make_user("racer@example.com", credits=10)
    caller = await db.get(User, user.id)

    # another session spends the balance after the caller was loaded
    async with session_factory() as other:
        await LedgerService(other).apply_adjustment(user.id, -10)

    with pytest.raises(InvalidArgumentError):
        await SearchService(db).submit_search(caller, "Rua A", "padaria", provider)

    async with session_factory() as fresh:
        assert (await fresh.get(User, user.id)).credits == 0
        assert (await fresh.execute(select(func.count(Search.id)))).scalar() == 0
        debits = await LedgerService(fresh).history(user.id)
    assert [tx.amount for tx in debits] == [-10, 10]


async def test_submit_search_blocked_user(db, make_user, provider):
    user = await make_user("blocked@example.com", credits=50)
    user = await UserService(db).set_status(user.id, UserStatus.BLOCKED)

    with pytest.raises(ForbiddenError):
        await SearchService(db).submit_search(user, "Rua G", "lojas", provider)


@pytest.mark.parametrize("submit, status_code", [
    ({"success": False}, 200),
    ({"error": "boom"}, 500),
])
async def test_provider_failure_charges_nothing(db, make_user, provider, provider_state, submit, status_code):
    user = await make_user("unlucky@example.com", credits=30)
    provider_state["submit"] = submit
    provider_state["submit_status"] = status_code

    with pytest.raises(ProviderError):
        await SearchService(db).submit_search(user, "Rua H", "lojas", provider)

    assert (await db.get(User, user.id)).credits == 30
    assert (await db.execute(select(func.count(Search.id)))).scalar() == 0


async def test_refresh_status_marks_finalized(db, make_user, provider, provider_state):
    user = await make_user("refresh@example.com")
    service = SearchService(db)
    search = await service.record(user.id, "ext-5", "Rua I", "lojas", 10)

    still_running = await service.refresh_status(user.id, search.id, provider)
    assert still_running.finalizado is False

    provider_state["status"] = {"status": "Finalizado"}
    done = await service.refresh_status(user.id, search.id, provider)
    assert done.finalizado is True


async def test_download_requires_finalized(db, make_user, provider, provider_state):
    user = await make_user("dl@example.com")
    service = SearchService(db)
    search = await service.record(user.id, "ext-6", "Rua J", "lojas", 10)

    with pytest.raises(InvalidArgumentError):
        await service.download(user.id, search.id, provider)

    await service.mark_finalized(search.id)
    _, content = await service.download(user.id, search.id, provider)
    assert content == provider_state["download"]
