"""SQLAlchemy implementation of LedgerSettingsRepository"""

from typing import Optional
from sqlalchemy import delete
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.ledger_settings_repository import LedgerSettingsRepository
from src.domain.base import utc_now
from src.domain.ledger_settings import LedgerSettings, GLOBAL_SETTINGS_ID


class SqlAlchemyLedgerSettingsRepository(LedgerSettingsRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self) -> Optional[LedgerSettings]:
        return await self.session.get(LedgerSettings, GLOBAL_SETTINGS_ID)

    async def save(self, settings: LedgerSettings) -> LedgerSettings:
        settings.updated_at = utc_now()
        self.session.add(settings)
        await self.session.flush()
        await self.session.refresh(settings)
        return settings

    async def delete_all(self) -> None:
        await self.session.execute(delete(LedgerSettings))
        await self.session.flush()
