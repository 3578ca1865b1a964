"""
System Settings Service
Typed runtime settings persisted as key/value rows.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from creditdesk.models.system_setting import SystemSetting
from creditdesk.schemas.settings import AppSettings

logger = logging.getLogger(__name__)


class SettingsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _rows(self) -> dict:
        keys = list(AppSettings.model_fields)
        result = await self.db.execute(select(SystemSetting).where(SystemSetting.key.in_(keys)))
        return {row.key: row for row in result.scalars().all()}

    async def get(self) -> AppSettings:
        """Current settings, falling back to defaults for keys never stored."""
        rows = await self._rows()
        return AppSettings.model_validate({key: row.value for key, row in rows.items()})

    async def update(self, new_settings: AppSettings) -> AppSettings:
        rows = await self._rows()
        for key, value in new_settings.model_dump().items():
            row = rows.get(key)
            if row is None:
                self.db.add(SystemSetting(key=key, value=str(value)))
            else:
                row.value = str(value)
        await self.db.commit()

        logger.info("System settings updated: %s", new_settings.model_dump())
        return new_settings
