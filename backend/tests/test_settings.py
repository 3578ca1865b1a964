# tests/test_settings.py
import pytest
from pydantic import ValidationError

from creditdesk.models.system_setting import SystemSetting
from creditdesk.schemas.settings import AppSettings
from creditdesk.services.settings_service import SettingsService


async def test_defaults_when_nothing_stored(db):
    assert (await SettingsService(db).get()).search_cost == 10


async def test_update_persists_typed_values(db, session_factory):
    await SettingsService(db).update(AppSettings(search_cost=25))

    async with session_factory() as session:
        current = await SettingsService(session).get()
        row = await session.get(SystemSetting, 1)

    assert current.search_cost == 25
    assert row.key == "search_cost"
    assert row.value == "25"


async def test_update_overwrites_existing_row(db):
    service = SettingsService(db)
    await service.update(AppSettings(search_cost=5))
    await service.update(AppSettings(search_cost=7))

    assert (await service.get()).search_cost == 7


def test_negative_cost_rejected():
    with pytest.raises(ValidationError):
        AppSettings(search_cost=-1)
