"""Get Settings Use Case"""

from decimal import Decimal
from libs.result import Result, Return
from src.app.repositories.ledger_settings_repository import LedgerSettingsRepository
from .dtos import SettingsDTO


class GetSettings:

    def __init__(self, settings_repo: LedgerSettingsRepository, default_farm_rate: Decimal):
        self.settings_repo = settings_repo
        self.default_farm_rate = Decimal(default_farm_rate)

    async def execute(self) -> Result[SettingsDTO]:
        settings = await self.settings_repo.get()
        if settings is None:
            return Return.ok(SettingsDTO(farm_rate=self.default_farm_rate))
        return Return.ok(
            SettingsDTO(
                farm_rate=settings.farm_rate,
                default_supply_rate=settings.default_supply_rate,
                last_backup=settings.last_backup,
            )
        )
